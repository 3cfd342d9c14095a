"""Repository for the append-only citation usage ledger."""

import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import CitationUsage, utcnow


class CitationUsageRepository:
    """Citation usage ledger operations.

    Usage counts are aggregated at read time, so concurrent writers for
    different articles never contend on a shared counter row.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add(
        self,
        article_id: uuid.UUID,
        citation_url: str,
        citation_domain: str,
        citation_source: str | None = None,
    ) -> CitationUsage:
        usage = CitationUsage(
            id=uuid.uuid4(),
            article_id=article_id,
            citation_url=citation_url,
            citation_domain=citation_domain,
            citation_source=citation_source,
            is_active=True,
            first_added_at=utcnow(),
        )
        self.db.add(usage)
        await self.db.flush()
        return usage

    async def active_domains_for_article(self, article_id: uuid.UUID) -> set[str]:
        """Domains with at least one active citation in the article."""
        result = await self.db.execute(
            select(CitationUsage.citation_domain)
            .where(CitationUsage.article_id == article_id)
            .where(CitationUsage.is_active.is_(True))
            .distinct()
        )
        return set(result.scalars().all())

    async def domain_usage(self) -> list[tuple[str, int, datetime | None]]:
        """(domain, total uses, last used) for every domain in the ledger.

        Ordered by total uses ascending, then least recently used first.
        """
        total = func.count(CitationUsage.id).label("total_uses")
        last_used = func.max(CitationUsage.first_added_at).label("last_used_at")
        result = await self.db.execute(
            select(CitationUsage.citation_domain, total, last_used)
            .group_by(CitationUsage.citation_domain)
            .order_by(total.asc(), last_used.asc())
        )
        return [(row[0], int(row[1]), row[2]) for row in result.all()]

    async def deactivate(self, article_id: uuid.UUID, citation_url: str) -> int:
        """Mark the article's active rows for ``citation_url`` inactive.

        Returns:
            Number of rows deactivated
        """
        result = await self.db.execute(
            update(CitationUsage)
            .where(CitationUsage.article_id == article_id)
            .where(CitationUsage.citation_url == citation_url)
            .where(CitationUsage.is_active.is_(True))
            .values(is_active=False, deactivated_at=utcnow())
        )
        await self.db.flush()
        return result.rowcount or 0
