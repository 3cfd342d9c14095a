"""Citation discovery and editing endpoints."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ....database.repositories.article_repository import ArticleRepository, to_article
from ....database.session import get_db
from ....models.citation import CitationSearchResult
from ....models.revision import BannedRemoval, ReplacementOutcome, RollbackOutcome
from ....services.citation_management import CitationManagementService
from ....services.citation_orchestrator import CitationOrchestrator
from ..dependencies import get_management_service, get_orchestrator
from ..schemas import FindCitationsRequest, RemoveBannedRequest, ReplaceCitationRequest

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["citations"])


@router.post("/citations/find", response_model=CitationSearchResult)
async def find_citations(
    request: FindCitationsRequest,
    db: AsyncSession = Depends(get_db),
    orchestrator: CitationOrchestrator = Depends(get_orchestrator),
    management: CitationManagementService = Depends(get_management_service),
) -> CitationSearchResult:
    """Find policy-compliant citations for a stored or inline article.

    Returns:
        CitationSearchResult; a failed search is a 200 with status "failed"
    """
    if request.article_id is not None:
        row = await ArticleRepository(db).get_or_raise(request.article_id)
        article = to_article(row)
    else:
        article = request.article

    result = await orchestrator.find_citations(
        article, target_count=request.target_count, use_context=request.use_context
    )

    if request.attach and result.citations:
        await management.attach_citations(request.article_id, result.citations)
        logger.info(
            "search_results_attached",
            article_id=str(request.article_id),
            count=len(result.citations),
        )
    return result


@router.post("/citations/replace", response_model=ReplacementOutcome)
async def replace_citation(
    request: ReplaceCitationRequest,
    management: CitationManagementService = Depends(get_management_service),
) -> ReplacementOutcome:
    return await management.replace_citation(
        request.article_id,
        request.old_url,
        request.new_url,
        source_name=request.source_name,
        description=request.description,
        confidence=request.confidence,
    )


@router.post("/citations/remove-banned", response_model=BannedRemoval)
async def remove_banned_citations(
    request: RemoveBannedRequest,
    management: CitationManagementService = Depends(get_management_service),
) -> BannedRemoval:
    """Strip competitor links and citations from an article (backup first)."""
    return await management.remove_banned_citations(request.article_id)


@router.post("/revisions/{revision_id}/rollback", response_model=RollbackOutcome)
async def rollback_revision(
    revision_id: uuid.UUID,
    management: CitationManagementService = Depends(get_management_service),
) -> RollbackOutcome:
    return await management.rollback_revision(revision_id)
