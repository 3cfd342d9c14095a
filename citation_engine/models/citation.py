"""Citation models shared by search, scoring, verification and storage."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuthorityTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    FAILED = "failed"

    @property
    def sort_rank(self) -> int:
        """verified < unverified < failed."""
        return {"verified": 0, "unverified": 1, "failed": 2}[self.value]


class SearchStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class AuthorityScores(BaseModel):
    """Authority score breakdown.

    Attributes:
        domain_score: Domain-class weight (0-40)
        content_score: Content-quality heuristics (0-30)
        accessibility_score: 20 if the URL responded, else 0
        relevance_score: Regional relevance (0-10)
        total: Sum of the components, capped at 100
        tier: high (>=70), medium (>=40) or low
    """

    domain_score: int = Field(..., ge=0, le=40)
    content_score: int = Field(..., ge=0, le=30)
    accessibility_score: int = Field(..., ge=0, le=20)
    relevance_score: int = Field(..., ge=0, le=10)
    total: int = Field(..., ge=0, le=100)
    tier: AuthorityTier

    model_config = {"frozen": True}


class VerificationResult(BaseModel):
    """Outcome of a URL liveness check."""

    url: str
    verified: bool
    status_code: int | None = None
    verification_status: VerificationStatus
    error: str | None = None
    skipped: bool = Field(default=False, description="PDF exemption applied, no request made")

    model_config = {"frozen": True}


class Citation(BaseModel):
    """A candidate or accepted external reference.

    Instances are immutable; replacement and rescoring produce new objects
    via ``model_copy(update=...)``.
    """

    url: str = Field(..., min_length=1)
    source_name: str = Field(default="")
    description: str = Field(default="")
    relevance: str = Field(default="")
    authority_score: int = Field(default=0, ge=0, le=100)
    authority_tier: AuthorityTier = AuthorityTier.LOW
    language: str = Field(default="en")
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    status_code: int | None = None
    domain: str = Field(default="", description="Normalized hostname")
    category: str | None = None
    target_sentence_id: str | None = None
    target_sentence: str | None = None
    suggested_anchor: str | None = None
    confidence_score: float | None = Field(default=None, ge=0.0, le=1.0)
    batch_tier: str | None = Field(default=None, description="Search wave that produced it")
    replaced_at: datetime | None = None
    replacement_confidence: float | None = None

    model_config = {"frozen": True}

    def to_external(self) -> ExternalCitation:
        """Shape stored in ``Article.external_citations``."""
        return ExternalCitation(
            url=self.url,
            source=self.source_name or self.domain,
            text=self.description,
            authority_score=self.authority_score,
            replaced_at=self.replaced_at,
            replacement_confidence=self.replacement_confidence,
        )


class ExternalCitation(BaseModel):
    """Citation entry as persisted on an article: ``{url, source, text, authorityScore}``."""

    url: str
    source: str = ""
    text: str = ""
    authority_score: int | None = Field(default=None, alias="authorityScore")
    replaced_at: datetime | None = None
    replacement_confidence: float | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    def to_storage(self) -> dict:
        """JSON-ready dict using the stored (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CitationSearchResult(BaseModel):
    """Outcome of one citation discovery run."""

    citations: list[Citation] = Field(default_factory=list)
    status: SearchStatus
    total_found: int = Field(default=0, ge=0, description="Accepted candidates before truncation")
    verified_count: int = Field(default=0, ge=0)
    target_count: int = Field(default=0, ge=0)
    tiers_searched: list[str] = Field(default_factory=list)
    reason: str | None = Field(default=None, description="Why the run failed or fell short")
