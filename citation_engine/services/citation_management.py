"""Destructive citation edits: attach, replace, remove banned, roll back.

Every edit writes a backup revision first and commits as one unit. Usage
ledger bookkeeping runs after the commit and never fails the edit.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import (
    CitationNotFoundError,
    CitationPolicyError,
    ReplacementVerificationError,
    RevisionNotRollbackableError,
)
from ..database.models import BlogArticle, utcnow
from ..database.repositories.article_repository import (
    ArticleRepository,
    RevisionRepository,
    to_article,
)
from ..database.repositories.compliance_alert_repository import ComplianceAlertRepository
from ..domains.registry import DomainRegistry
from ..models.article import Article
from ..models.citation import Citation, ExternalCitation, VerificationStatus
from ..models.revision import BannedRemoval, ReplacementOutcome, RollbackOutcome
from ..scoring.authority_scorer import AuthorityScorer
from ..utils.html_links import extract_hrefs, replace_link_url, strip_links
from .domain_rotation import DomainRotationTracker
from .verification.url_verifier import UrlVerifier

logger = structlog.get_logger(__name__)

REVISION_ATTACH = "citation_attach"
REVISION_REPLACEMENT = "citation_replacement"
REVISION_BANNED_REMOVAL = "banned_citation_removal"


def _stored_citations(article: BlogArticle) -> list[ExternalCitation]:
    return to_article(article).external_citations


class CitationManagementService:
    """Applies citation changes to stored articles.

    Example:
        >>> service = CitationManagementService(db, registry, verifier)
        >>> outcome = await service.replace_citation(
        ...     article_id, "https://dead.example.gob.es/a", "https://www.boe.es/a"
        ... )
        >>> outcome.replaced_count
        1
    """

    def __init__(
        self,
        db: AsyncSession,
        registry: DomainRegistry,
        verifier: UrlVerifier,
        scorer: AuthorityScorer | None = None,
        rotation: DomainRotationTracker | None = None,
        rollback_hours: int | None = None,
    ):
        self.db = db
        self.registry = registry
        self.verifier = verifier
        self.scorer = scorer or AuthorityScorer()
        self.rotation = rotation or DomainRotationTracker(db, registry)
        self.rollback_hours = rollback_hours or settings.REVISION_ROLLBACK_HOURS
        self.articles = ArticleRepository(db)
        self.revisions = RevisionRepository(db)
        self.alerts = ComplianceAlertRepository(db)

    def enforce_policy(self, url: str) -> None:
        """Reject competitor and non-approved URLs.

        Raises:
            CitationPolicyError: If the URL may not be cited
        """
        if self.registry.is_competitor(url):
            raise CitationPolicyError(
                url, f"Competitor domain ({self.registry.competitor_reason(url)})"
            )
        if not self.registry.is_approved_domain(url):
            raise CitationPolicyError(url, "Domain is not approved")

    async def attach_citations(
        self, article_id: uuid.UUID, citations: Sequence[Citation]
    ) -> Article:
        """Replace the article's stored citations with ``citations``.

        Raises:
            ArticleNotFoundError: If the article does not exist
            CitationPolicyError: If any citation violates the domain policy
        """
        for citation in citations:
            self.enforce_policy(citation.url)

        row = await self.articles.get_or_raise(article_id)
        previous_urls = {c.url for c in _stored_citations(row)}
        await self.revisions.create_backup(
            row,
            REVISION_ATTACH,
            f"Attached {len(citations)} citations",
            self.rollback_hours,
        )
        await self.articles.update_citations(
            row, [c.to_external().to_storage() for c in citations]
        )
        await self.db.commit()
        logger.info("citations_attached", article_id=str(article_id), count=len(citations))

        new_urls = {c.url for c in citations}
        for url in previous_urls - new_urls:
            await self.rotation.deactivate(article_id, url)
        for citation in citations:
            if citation.url not in previous_urls:
                await self.rotation.record_usage(article_id, citation.url, citation.source_name)

        return to_article(row)

    async def replace_citation(
        self,
        article_id: uuid.UUID,
        old_url: str,
        new_url: str,
        source_name: str | None = None,
        description: str | None = None,
        confidence: float | None = None,
    ) -> ReplacementOutcome:
        """Swap ``old_url`` for ``new_url`` in the article's citations and links.

        The replacement is verified (not probed when both URLs are PDFs) and
        checked against the domain policy before anything is written.

        Raises:
            ArticleNotFoundError: If the article does not exist
            CitationNotFoundError: If the article does not cite ``old_url``
            CitationPolicyError: If ``new_url`` violates the domain policy
            ReplacementVerificationError: If ``new_url`` is not reachable
        """
        self.enforce_policy(new_url)
        row = await self.articles.get_or_raise(article_id)

        stored = _stored_citations(row)
        cited_in_body = old_url in extract_hrefs(row.detailed_content or "")
        if not cited_in_body and all(c.url != old_url for c in stored):
            raise CitationNotFoundError(f"Article {article_id} does not cite {old_url}")

        verification = await self.verifier.verify(new_url, original_url=old_url)
        if verification.verification_status == VerificationStatus.FAILED:
            logger.warning(
                "replacement_rejected",
                article_id=str(article_id),
                new_url=new_url,
                status_code=verification.status_code,
                error=verification.error,
            )
            raise ReplacementVerificationError(new_url, verification.status_code, verification.error)

        revision = await self.revisions.create_backup(
            row,
            REVISION_REPLACEMENT,
            f"Replaced citation: {old_url}",
            self.rollback_hours,
            replaced_url=old_url,
            replacement_url=new_url,
        )

        replaced_at = datetime.now(timezone.utc)
        replaced = 0
        updated: list[dict] = []
        for citation in stored:
            if citation.url != old_url:
                updated.append(citation.to_storage())
                continue
            replaced += 1
            source = source_name or citation.source
            text = description or citation.text
            scores = self.scorer.score(new_url, source, text, is_accessible=verification.verified)
            swapped = citation.model_copy(
                update={
                    "url": new_url,
                    "source": source,
                    "text": text,
                    "authority_score": scores.total,
                    "replaced_at": replaced_at,
                    "replacement_confidence": confidence,
                }
            )
            updated.append(swapped.to_storage())

        content = replace_link_url(row.detailed_content or "", old_url, new_url)
        await self.articles.update_citations(row, updated, content=content)
        await self.alerts.resolve(article_id, old_url)
        await self.db.commit()

        logger.info(
            "citation_replaced",
            article_id=str(article_id),
            old_url=old_url,
            new_url=new_url,
            replaced=replaced,
            links_rewritten=cited_in_body,
        )

        await self.rotation.deactivate(article_id, old_url)
        await self.rotation.record_usage(article_id, new_url, source_name)

        return ReplacementOutcome(
            article_id=article_id,
            old_url=old_url,
            new_url=new_url,
            revision_id=revision.id,
            replaced_count=replaced,
            links_rewritten=cited_in_body,
            verification=verification,
        )

    async def remove_banned_citations(self, article_id: uuid.UUID) -> BannedRemoval:
        """Strip competitor links (keeping their anchor text) and citations.

        Nothing is written when the article is already clean.
        """
        row = await self.articles.get_or_raise(article_id)
        removal = strip_links(row.detailed_content or "", self.registry.is_competitor)

        kept: list[dict] = []
        removed = list(removal.removed_urls)
        for citation in _stored_citations(row):
            if self.registry.is_competitor(citation.url):
                removed.append(citation.url)
            else:
                kept.append(citation.to_storage())
        removed = list(dict.fromkeys(removed))

        if not removed:
            return BannedRemoval(article_id=article_id)

        revision = await self.revisions.create_backup(
            row,
            REVISION_BANNED_REMOVAL,
            f"Removed {len(removed)} competitor citations",
            self.rollback_hours,
        )
        await self.articles.update_citations(row, kept, content=removal.cleaned_content)
        for url in removed:
            await self.alerts.resolve(article_id, url)
        await self.db.commit()
        logger.info("banned_citations_removed", article_id=str(article_id), removed=removed)

        for url in removed:
            await self.rotation.deactivate(article_id, url)

        return BannedRemoval(article_id=article_id, removed_urls=removed, revision_id=revision.id)

    async def rollback_revision(self, revision_id: uuid.UUID) -> RollbackOutcome:
        """Restore the content and citations saved in a revision.

        The usage ledger follows: citations the revision drops are deactivated
        and the ones it brings back are recorded again.

        Raises:
            RevisionNotRollbackableError: If the revision is missing, already
                rolled back, or past its rollback window
        """
        revision = await self.revisions.get(revision_id)
        if revision is None:
            raise RevisionNotRollbackableError(f"Revision {revision_id} not found")
        if not revision.can_rollback or revision.rolled_back_at is not None:
            raise RevisionNotRollbackableError(f"Revision {revision_id} was already rolled back")
        if revision.rollback_expires_at is not None and revision.rollback_expires_at < utcnow():
            raise RevisionNotRollbackableError(f"Rollback window for revision {revision_id} expired")

        row = await self.articles.get_or_raise(revision.article_id)
        previous = list(revision.previous_citations or [])
        current_urls = {c.url for c in _stored_citations(row)}
        if revision.replacement_url:
            current_urls.add(revision.replacement_url)
        sources = {c.get("url"): c.get("source") for c in previous if c.get("url")}
        if revision.replaced_url:
            sources.setdefault(revision.replaced_url, None)

        await self.articles.update_citations(row, previous, content=revision.previous_content)
        await self.revisions.mark_rolled_back(revision)
        await self.db.commit()

        logger.info(
            "revision_rolled_back",
            revision_id=str(revision_id),
            article_id=str(row.id),
            revision_type=revision.revision_type,
        )

        for url in current_urls - sources.keys():
            await self.rotation.deactivate(row.id, url)
        for url, source in sources.items():
            if url not in current_urls:
                await self.rotation.record_usage(row.id, url, source)

        return RollbackOutcome(
            article_id=row.id, revision_id=revision.id, revision_type=revision.revision_type
        )
