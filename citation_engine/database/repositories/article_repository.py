"""Repositories for articles and their backup revisions."""

import uuid
from datetime import timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import ArticleNotFoundError
from ...models.article import Article
from ...models.citation import ExternalCitation
from ..models import ArticleRevision, BlogArticle, utcnow


def to_article(row: BlogArticle) -> Article:
    """Convert a BlogArticle row into the engine's Article model."""
    return Article(
        id=row.id,
        slug=row.slug,
        headline=row.headline,
        detailed_content=row.detailed_content or "",
        language=row.language,
        funnel_stage=row.funnel_stage,
        status=row.status,
        external_citations=[
            ExternalCitation.model_validate(c)
            for c in (row.external_citations or [])
            if isinstance(c, dict) and c.get("url")
        ],
    )


class ArticleRepository:
    """Read access to articles; writes limited to content and citations.

    Methods flush but do not commit; the calling service owns the transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, article_id: uuid.UUID) -> BlogArticle | None:
        return await self.db.get(BlogArticle, article_id)

    async def get_or_raise(self, article_id: uuid.UUID) -> BlogArticle:
        """Fetch an article.

        Raises:
            ArticleNotFoundError: If no article has this id
        """
        article = await self.get(article_id)
        if article is None:
            raise ArticleNotFoundError(f"Article {article_id} not found")
        return article

    async def list_by_status(self, status: str | None = "published") -> list[BlogArticle]:
        """Articles with the given status (all articles when ``status`` is None)."""
        query = select(BlogArticle).order_by(BlogArticle.created_at)
        if status is not None:
            query = query.where(BlogArticle.status == status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> BlogArticle:
        article = BlogArticle(**fields)
        self.db.add(article)
        await self.db.flush()
        return article

    async def update_citations(
        self,
        article: BlogArticle,
        citations: list[dict[str, Any]],
        content: str | None = None,
    ) -> BlogArticle:
        """Replace the citation array (and optionally the body), stamping modification times."""
        now = utcnow()
        article.external_citations = list(citations)
        if content is not None:
            article.detailed_content = content
        article.updated_at = now
        article.date_modified = now
        await self.db.flush()
        return article


class RevisionRepository:
    """Backup revisions written before destructive article edits."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_backup(
        self,
        article: BlogArticle,
        revision_type: str,
        change_reason: str,
        rollback_hours: int,
        replaced_url: str | None = None,
        replacement_url: str | None = None,
    ) -> ArticleRevision:
        """Snapshot the article's current content and citations."""
        revision = ArticleRevision(
            id=uuid.uuid4(),
            article_id=article.id,
            revision_type=revision_type,
            previous_content=article.detailed_content or "",
            previous_citations=list(article.external_citations or []),
            change_reason=change_reason,
            replaced_url=replaced_url,
            replacement_url=replacement_url,
            can_rollback=True,
            rollback_expires_at=utcnow() + timedelta(hours=rollback_hours),
            created_at=utcnow(),
        )
        self.db.add(revision)
        await self.db.flush()
        return revision

    async def get(self, revision_id: uuid.UUID) -> ArticleRevision | None:
        return await self.db.get(ArticleRevision, revision_id)

    async def list_for_article(self, article_id: uuid.UUID) -> list[ArticleRevision]:
        result = await self.db.execute(
            select(ArticleRevision)
            .where(ArticleRevision.article_id == article_id)
            .order_by(ArticleRevision.created_at.desc())
        )
        return list(result.scalars().all())

    async def mark_rolled_back(self, revision: ArticleRevision) -> ArticleRevision:
        revision.can_rollback = False
        revision.rolled_back_at = utcnow()
        await self.db.flush()
        return revision
