"""Repository for the persisted domain registry.

Supports the administrative bulk-load (upsert of the static registry) and
loading registry entries back from storage, with an in-memory cache that is
invalidated on every write.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.domain import (
    CompetitorEntry,
    DomainCategory,
    DomainRegistryEntry,
    SearchTier,
)
from ..models import ApprovedDomain, CompetitorDomain, utcnow


class DomainRepository:
    """Approved and competitor domain operations with caching."""

    def __init__(self, db: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            db: Async SQLAlchemy database session
        """
        self.db = db
        self._cache: tuple[list[DomainRegistryEntry], list[CompetitorEntry]] | None = None

    def _invalidate_cache(self) -> None:
        self._cache = None

    async def upsert_approved(self, entries: Iterable[DomainRegistryEntry]) -> int:
        """Insert or update approved domains keyed by domain.

        Returns:
            Number of rows written
        """
        entries = list(entries)
        result = await self.db.execute(
            select(ApprovedDomain).where(ApprovedDomain.domain.in_([e.domain for e in entries]))
        )
        existing = {row.domain: row for row in result.scalars().all()}

        now = utcnow()
        for entry in entries:
            row = existing.get(entry.domain)
            if row is None:
                self.db.add(
                    ApprovedDomain(
                        domain=entry.domain,
                        category=entry.category.value,
                        tier=entry.tier.value,
                        trust_score=entry.trust_score,
                        is_allowed=True,
                        created_at=now,
                        updated_at=now,
                    )
                )
            else:
                row.category = entry.category.value
                row.tier = entry.tier.value
                row.trust_score = entry.trust_score
                row.is_allowed = True
                row.updated_at = now

        await self.db.flush()
        self._invalidate_cache()
        return len(entries)

    async def upsert_competitors(self, entries: Iterable[CompetitorEntry]) -> int:
        entries = list(entries)
        result = await self.db.execute(
            select(CompetitorDomain).where(
                CompetitorDomain.domain.in_([e.domain for e in entries])
            )
        )
        existing = {row.domain: row for row in result.scalars().all()}

        for entry in entries:
            row = existing.get(entry.domain)
            if row is None:
                self.db.add(CompetitorDomain(domain=entry.domain, reason=entry.reason))
            else:
                row.reason = entry.reason

        await self.db.flush()
        self._invalidate_cache()
        return len(entries)

    async def load_entries(self) -> tuple[list[DomainRegistryEntry], list[CompetitorEntry]]:
        """Allowed approved domains and all competitors, cached after the first call."""
        if self._cache is not None:
            return self._cache

        approved = await self.db.execute(
            select(ApprovedDomain)
            .where(ApprovedDomain.is_allowed.is_(True))
            .order_by(ApprovedDomain.tier, ApprovedDomain.created_at, ApprovedDomain.domain)
        )
        entries = [
            DomainRegistryEntry(
                domain=row.domain,
                category=DomainCategory(row.category),
                tier=SearchTier(row.tier),
                trust_score=row.trust_score,
            )
            for row in approved.scalars().all()
        ]

        competitors = await self.db.execute(select(CompetitorDomain).order_by(CompetitorDomain.domain))
        blacklist = [
            CompetitorEntry(domain=row.domain, reason=row.reason or "Real estate competitor")
            for row in competitors.scalars().all()
        ]

        self._cache = (entries, blacklist)
        return self._cache
