"""Repository for citation compliance alerts."""

import uuid
from collections.abc import Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.compliance import ComplianceViolation
from ..models import ComplianceAlertRecord, utcnow


class ComplianceAlertRepository:
    """Compliance alert operations.

    ``replace_unresolved`` deletes an article's unresolved alerts before
    inserting the fresh set, so repeated scans never accumulate duplicates.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def replace_unresolved(
        self, article_id: uuid.UUID, violations: Sequence[ComplianceViolation]
    ) -> list[ComplianceAlertRecord]:
        """Swap the article's unresolved alerts for ``violations`` (deduplicated).

        Returns:
            The inserted alert rows
        """
        await self.db.execute(
            delete(ComplianceAlertRecord)
            .where(ComplianceAlertRecord.article_id == article_id)
            .where(ComplianceAlertRecord.resolved_at.is_(None))
        )

        seen: set[tuple[str, str, str]] = set()
        records = []
        now = utcnow()
        for violation in violations:
            if violation.key in seen:
                continue
            seen.add(violation.key)
            record = ComplianceAlertRecord(
                id=uuid.uuid4(),
                alert_type=violation.alert_type.value,
                severity=violation.severity.value,
                citation_url=violation.citation_url,
                article_id=article_id,
                article_title=violation.article_title,
                message=violation.message,
                detected_at=now,
            )
            self.db.add(record)
            records.append(record)

        await self.db.flush()
        return records

    async def list_unresolved(
        self, article_id: uuid.UUID | None = None
    ) -> list[ComplianceAlertRecord]:
        query = select(ComplianceAlertRecord).where(ComplianceAlertRecord.resolved_at.is_(None))
        if article_id is not None:
            query = query.where(ComplianceAlertRecord.article_id == article_id)
        result = await self.db.execute(
            query.order_by(ComplianceAlertRecord.detected_at, ComplianceAlertRecord.citation_url)
        )
        return list(result.scalars().all())

    async def count_unresolved(self) -> int:
        result = await self.db.execute(
            select(func.count(ComplianceAlertRecord.id)).where(
                ComplianceAlertRecord.resolved_at.is_(None)
            )
        )
        return int(result.scalar_one())

    async def resolve(self, article_id: uuid.UUID, citation_url: str) -> int:
        """Resolve the article's open alerts for ``citation_url``.

        Returns:
            Number of alerts resolved
        """
        result = await self.db.execute(
            update(ComplianceAlertRecord)
            .where(ComplianceAlertRecord.article_id == article_id)
            .where(ComplianceAlertRecord.citation_url == citation_url)
            .where(ComplianceAlertRecord.resolved_at.is_(None))
            .values(resolved_at=utcnow())
        )
        await self.db.flush()
        return result.rowcount or 0
