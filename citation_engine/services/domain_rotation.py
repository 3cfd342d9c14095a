"""Domain rotation: bias citation searches away from overused domains.

Rotation is a ranking signal, never a hard constraint. Reads fall back to
"no bias" and writes never block citation attachment.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..database.repositories.citation_usage_repository import CitationUsageRepository
from ..domains.registry import DomainRegistry
from ..utils.url_utils import extract_domain

logger = structlog.get_logger(__name__)


def underutilized_rank(underutilized: Sequence[str]) -> dict[str, int]:
    """Position of each domain in the underutilized list (0 = least used)."""
    return {domain: i for i, domain in enumerate(underutilized)}


def rotation_sort_key(rank: dict[str, int]):
    """Sort key putting underutilized domains first, least used first.

    Domains not in ``rank`` sort after all ranked ones; ``sorted`` keeps
    their original relative order.
    """
    unranked = len(rank)

    def _key(domain: str) -> int:
        return rank.get(domain, unranked)

    return _key


def filter_and_prioritize(
    candidate_domains: Sequence[str],
    used_in_article: Collection[str],
    underutilized: Sequence[str],
) -> list[str]:
    """Drop domains already used in the article, then stable-sort underutilized first.

    Args:
        candidate_domains: Domains in their original priority order
        used_in_article: Domains already cited by the article
        underutilized: Globally least-used domains, least used first

    Returns:
        Remaining domains, reordered
    """
    remaining = [d for d in candidate_domains if d not in used_in_article]
    rank = underutilized_rank(underutilized)
    return sorted(remaining, key=rotation_sort_key(rank))


class DomainRotationTracker:
    """Reads and writes the citation usage ledger."""

    def __init__(self, db: AsyncSession, registry: DomainRegistry) -> None:
        self.db = db
        self.registry = registry
        self.usage = CitationUsageRepository(db)

    def ledger_domain(self, url: str) -> str:
        """Registry domain covering the URL, or its bare hostname."""
        entry = self.registry.match(url)
        return entry.host if entry else extract_domain(url)

    async def get_article_used_domains(self, article_id: uuid.UUID) -> set[str]:
        """Domains the article already cites (active citations only)."""
        return await self.usage.active_domains_for_article(article_id)

    async def get_underutilized_domains(self, limit: int | None = None) -> list[str]:
        """Registry domains ordered by total historical use, least used first.

        Never-used domains come first, in registry order. Ties on use count
        are broken by least recent use.
        """
        limit = limit or settings.ROTATION_UNDERUTILIZED_LIMIT
        usage = await self.usage.domain_usage()
        used = {domain for domain, _, _ in usage}

        never_used: list[str] = []
        for batch in self.registry.all_domains():
            for domain in batch.domains:
                if domain not in used and domain not in never_used:
                    never_used.append(domain)

        # usage rows are already ordered by (total, last_used)
        ordered = never_used + [domain for domain, _, _ in usage]
        return ordered[:limit]

    async def record_usage(
        self, article_id: uuid.UUID, url: str, source: str | None = None
    ) -> bool:
        """Append a usage row and commit it. Failures are logged and swallowed.

        Returns:
            True if the row was written
        """
        try:
            await self.usage.add(article_id, url, self.ledger_domain(url), source)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.warning(
                "usage_record_failed", article_id=str(article_id), url=url, error=str(e)
            )
            return False
        return True

    async def deactivate(self, article_id: uuid.UUID, url: str) -> bool:
        """Mark a removed citation inactive. Failures are logged and swallowed."""
        try:
            await self.usage.deactivate(article_id, url)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.warning(
                "usage_deactivate_failed", article_id=str(article_id), url=url, error=str(e)
            )
            return False
        return True
