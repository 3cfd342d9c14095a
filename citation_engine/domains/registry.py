"""Domain Registry: allow-list, competitor blacklist and search tiers.

The registry is immutable once built. Build it once at process start
(``get_default_registry()``) or from storage (``DomainRegistry.from_entries``)
and pass it to every component that needs domain policy.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from functools import lru_cache
from types import MappingProxyType

import structlog

from ..core.config import settings
from ..models.domain import (
    CompetitorEntry,
    DomainCategory,
    DomainRegistryEntry,
    SearchTier,
    TierBatch,
)
from ..utils.url_utils import extract_host, extract_path
from .approved_domains import APPROVED_DOMAINS
from .competitor_blacklist import (
    COMPETITOR_DOMAINS,
    COMPETITOR_REASONS,
    DEFAULT_COMPETITOR_REASON,
)
from .search_tiers import (
    CATEGORY_DEFAULT_TIERS,
    GOVERNMENT_HOST_PATTERNS,
    SEARCH_TIERS,
    TierDefinition,
)

logger = structlog.get_logger(__name__)

MAX_DOMAINS_PER_BATCH = 20

GOVERNMENT_CATEGORIES = frozenset(
    {DomainCategory.GOVERNMENT_OFFICIAL, DomainCategory.LOCAL_GOVERNMENT}
)


def _clean_domain(domain: str) -> str:
    domain = domain.strip().lower().rstrip("/")
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def competitor_reason_for(domain: str) -> str:
    """Classify a competitor hostname into a human-readable reason."""
    for markers, reason in COMPETITOR_REASONS:
        if any(marker in domain for marker in markers):
            return reason
    return DEFAULT_COMPETITOR_REASON


class DomainRegistry:
    """Immutable registry of approved domains, competitors and search tiers.

    Example:
        >>> registry = get_default_registry()
        >>> registry.is_approved_domain("https://www.boe.es/buscar/doc.php")
        True
        >>> registry.get_domain_category("https://sede.catastro.gob.es/")
        <DomainCategory.GOVERNMENT_OFFICIAL: 'government_official'>
        >>> registry.is_competitor("https://www.idealista.com/venta")
        True
    """

    def __init__(
        self,
        entries: Iterable[DomainRegistryEntry],
        competitors: Iterable[CompetitorEntry],
        tier_labels: Mapping[SearchTier, str] | None = None,
        max_batch_size: int = MAX_DOMAINS_PER_BATCH,
    ) -> None:
        if not 1 <= max_batch_size <= MAX_DOMAINS_PER_BATCH:
            raise ValueError(f"max_batch_size must be between 1 and {MAX_DOMAINS_PER_BATCH}")

        unique: dict[str, DomainRegistryEntry] = {}
        for entry in entries:
            domain = _clean_domain(entry.domain)
            if domain in unique:
                logger.debug(
                    "duplicate_domain_ignored",
                    domain=domain,
                    kept_category=unique[domain].category.value,
                    ignored_category=entry.category.value,
                )
                continue
            unique[domain] = entry if domain == entry.domain else entry.model_copy(update={"domain": domain})

        self._entries: tuple[DomainRegistryEntry, ...] = tuple(unique.values())
        self._by_host: dict[str, list[DomainRegistryEntry]] = {}
        for entry in self._entries:
            self._by_host.setdefault(entry.host, []).append(entry)
        # Path-scoped entries are checked before host-wide ones
        for host_entries in self._by_host.values():
            host_entries.sort(key=lambda e: e.path_prefix is None)

        seen_competitors: dict[str, CompetitorEntry] = {}
        for competitor in competitors:
            domain = _clean_domain(competitor.domain)
            seen_competitors.setdefault(domain, competitor.model_copy(update={"domain": domain}))
        self._competitors: tuple[CompetitorEntry, ...] = tuple(seen_competitors.values())

        self._tier_labels = MappingProxyType(
            dict(tier_labels or {t.tier: t.label for t in SEARCH_TIERS})
        )
        self._max_batch_size = max_batch_size
        self._batches = self._build_batches()

        self.overlapping_domains: frozenset[str] = frozenset(
            entry.domain for entry in self._entries if self.is_competitor(f"https://{entry.domain}")
        )
        if self.overlapping_domains:
            logger.warning(
                "approved_competitor_overlap",
                domains=sorted(self.overlapping_domains),
                count=len(self.overlapping_domains),
            )

    @classmethod
    def from_static(
        cls,
        approved: Mapping[DomainCategory, Sequence[str]] = APPROVED_DOMAINS,
        competitors: Sequence[str] = COMPETITOR_DOMAINS,
        tiers: Sequence[TierDefinition] = SEARCH_TIERS,
        category_tiers: Mapping[DomainCategory, SearchTier] = CATEGORY_DEFAULT_TIERS,
        max_batch_size: int = MAX_DOMAINS_PER_BATCH,
    ) -> DomainRegistry:
        """Build a registry from category lists and a tier table.

        Raises:
            ValueError: If a tier lists a domain that is not approved
        """
        categories: dict[str, DomainCategory] = {}
        for category, domains in approved.items():
            for domain in domains:
                categories.setdefault(_clean_domain(domain), category)

        tier_of: dict[str, SearchTier] = {}
        for definition in tiers:
            for domain in definition.domains:
                domain = _clean_domain(domain)
                if domain not in categories:
                    raise ValueError(
                        f"{definition.label} lists '{domain}' which is not an approved domain"
                    )
                tier_of.setdefault(domain, definition.tier)

        # Tier-table order first, then domains only reachable via their category
        ordered = list(tier_of) + [d for d in categories if d not in tier_of]
        entries = []
        for domain in ordered:
            category = categories[domain]
            tier = tier_of.get(domain) or category_tiers.get(category, SearchTier.F)
            entries.append(
                DomainRegistryEntry(
                    domain=domain, category=category, tier=tier, trust_score=tier.trust_score
                )
            )

        return cls(
            entries=entries,
            competitors=[
                CompetitorEntry(domain=d, reason=competitor_reason_for(d)) for d in competitors
            ],
            tier_labels={t.tier: t.label for t in tiers},
            max_batch_size=max_batch_size,
        )

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[DomainRegistryEntry],
        competitors: Iterable[CompetitorEntry],
        max_batch_size: int = MAX_DOMAINS_PER_BATCH,
    ) -> DomainRegistry:
        """Build a registry from persisted entries (see DomainRepository)."""
        return cls(entries=entries, competitors=competitors, max_batch_size=max_batch_size)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def entries(self) -> tuple[DomainRegistryEntry, ...]:
        return self._entries

    @property
    def competitors(self) -> tuple[CompetitorEntry, ...]:
        return self._competitors

    def match(self, url: str) -> DomainRegistryEntry | None:
        """Most specific registry entry covering ``url``, or None.

        The hostname must equal or be a subdomain of the entry's host; a
        path-scoped entry additionally requires the URL path to start with
        its path prefix.
        """
        host = extract_host(url)
        if not host:
            return None
        path = extract_path(url).lower().rstrip("/") or "/"

        labels = host.split(".")
        for i in range(len(labels)):
            for entry in self._by_host.get(".".join(labels[i:]), ()):
                prefix = entry.path_prefix
                if prefix is None or path == prefix or path.startswith(prefix + "/"):
                    return entry
        return None

    def is_approved_domain(self, url: str) -> bool:
        return self.match(url) is not None

    def get_domain_category(self, url: str) -> DomainCategory | None:
        entry = self.match(url)
        return entry.category if entry else None

    def is_competitor(self, url: str) -> bool:
        """Bidirectional substring match of the hostname against the blacklist.

        Unparseable input is compared as a lowercased raw string.
        """
        return self._match_competitor(url) is not None

    def competitor_reason(self, url: str) -> str | None:
        competitor = self._match_competitor(url)
        return competitor.reason if competitor else None

    def _match_competitor(self, url: str) -> CompetitorEntry | None:
        domain = extract_host(url) or _clean_domain(url or "")
        if not domain:
            return None
        for competitor in self._competitors:
            if competitor.domain in domain or domain in competitor.domain:
                return competitor
        return None

    def is_government_url(self, url: str) -> bool:
        """Government/official institution, by host pattern or registry category."""
        host = extract_host(url)
        if not host:
            return False
        haystack = f".{host}."
        for pattern in GOVERNMENT_HOST_PATTERNS:
            needle = pattern if pattern.endswith(".") else pattern + "."
            if needle in haystack:
                return True
        return self.get_domain_category(url) in GOVERNMENT_CATEGORIES

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def get_all_approved_domains(self) -> list[str]:
        return [entry.domain for entry in self._entries]

    def competitor_domains(self) -> list[str]:
        return [competitor.domain for competitor in self._competitors]

    def all_domains(self) -> tuple[TierBatch, ...]:
        """Registry partitioned into search batches, in tier priority order."""
        return self._batches

    def domain_summary(self) -> dict[str, int]:
        """Number of approved domains per category, plus ``total``."""
        summary: dict[str, int] = {}
        for entry in self._entries:
            summary[entry.category.value] = summary.get(entry.category.value, 0) + 1
        summary["total"] = len(self._entries)
        return summary

    def _build_batches(self) -> tuple[TierBatch, ...]:
        batches: list[TierBatch] = []
        for tier in SearchTier:
            hosts: list[str] = []
            for entry in self._entries:
                if entry.tier == tier and entry.host not in hosts:
                    hosts.append(entry.host)
            for index, start in enumerate(range(0, len(hosts), self._max_batch_size)):
                batches.append(
                    TierBatch(
                        tier=tier,
                        label=self._tier_labels.get(tier, f"Tier {tier.value}"),
                        batch_index=index,
                        domains=tuple(hosts[start : start + self._max_batch_size]),
                    )
                )
        return tuple(batches)


@lru_cache(maxsize=1)
def get_default_registry() -> DomainRegistry:
    """Registry built from the static configuration (cached)."""
    registry = DomainRegistry.from_static(max_batch_size=settings.SEARCH_MAX_DOMAINS_PER_BATCH)
    logger.info("domain_registry_loaded", **registry.domain_summary())
    return registry
