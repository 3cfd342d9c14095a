"""Domain registry value objects."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class DomainCategory(str, Enum):
    """Topical bucket an approved domain belongs to."""

    CLIMATE_WEATHER = "climate_weather"
    GOVERNMENT_OFFICIAL = "government_official"
    TOURISM_CULTURE = "tourism_culture"
    NEWS_MEDIA = "news_media"
    LEGAL_PROFESSIONAL = "legal_professional"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    NATURE_OUTDOOR = "nature_outdoor"
    GASTRONOMY = "gastronomy"
    SPORTS_RECREATION = "sports_recreation"
    EXPAT_RESOURCES = "expat_resources"
    FINANCE = "finance"
    TRANSPORTATION = "transportation"
    TELECOM = "telecom"
    LOCAL_GOVERNMENT = "local_government"
    SHOPPING = "shopping"
    SUSTAINABILITY = "sustainability"


class SearchTier(str, Enum):
    """Search-batch ordering tier (S first, F last)."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"

    @property
    def priority(self) -> int:
        """Rank in the cascade (0 = searched first)."""
        return list(SearchTier).index(self)

    @property
    def trust_score(self) -> int:
        """Trust weight derived from the tier (S=100 down to F=40)."""
        return 100 - 10 * self.priority


class DomainRegistryEntry(BaseModel):
    """One allow-listed domain.

    Attributes:
        domain: Hostname, optionally with a path prefix ("ikea.com/es")
        category: Owning topical category
        tier: Search tier the domain is batched into
        trust_score: Weight derived from the tier
    """

    domain: str = Field(..., min_length=1)
    category: DomainCategory
    tier: SearchTier
    trust_score: int = Field(..., ge=0, le=100)

    model_config = {"frozen": True}

    @property
    def host(self) -> str:
        return self.domain.split("/", 1)[0]

    @property
    def path_prefix(self) -> str | None:
        """Path part of a path-scoped entry ("/es"), None for host-only entries."""
        if "/" not in self.domain:
            return None
        return "/" + self.domain.split("/", 1)[1].strip("/")


class CompetitorEntry(BaseModel):
    """One blacklisted competitor hostname."""

    domain: str = Field(..., min_length=1)
    reason: str = Field(default="Real estate competitor")

    model_config = {"frozen": True}


class TierBatch(BaseModel):
    """A batch of at most 20 domains searched with one AI-search call.

    Attributes:
        tier: Tier the batch belongs to
        label: Human-readable tier label ("Tier S (Gov/Official)")
        batch_index: Position of the batch inside its tier (0-based)
        domains: Domains passed as the search domain filter
    """

    tier: SearchTier
    label: str
    batch_index: int = 0
    domains: tuple[str, ...] = Field(..., min_length=1, max_length=20)

    model_config = {"frozen": True}

    @property
    def name(self) -> str:
        if self.batch_index == 0:
            return self.label
        return f"{self.label} #{self.batch_index + 1}"
