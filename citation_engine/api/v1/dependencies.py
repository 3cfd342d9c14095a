"""FastAPI dependencies wiring services to the request's database session."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...database.session import get_db
from ...domains.registry import DomainRegistry, get_default_registry
from ...services.citation_management import CitationManagementService
from ...services.citation_orchestrator import CitationOrchestrator
from ...services.compliance_auditor import ComplianceAuditor, ComplianceService
from ...services.domain_rotation import DomainRotationTracker
from ...services.search.base import AISearchClient
from ...services.search.perplexity_client import PerplexityClient
from ...services.verification.url_verifier import UrlVerifier


def get_registry() -> DomainRegistry:
    return get_default_registry()


async def get_search_client() -> AsyncGenerator[AISearchClient, None]:
    """Perplexity client for one request (503 when no API key is configured)."""
    try:
        client = PerplexityClient()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "search_unavailable", "message": str(e)},
        ) from e
    try:
        yield client
    finally:
        await client.close()


async def get_verifier(
    registry: DomainRegistry = Depends(get_registry),
) -> AsyncGenerator[UrlVerifier, None]:
    verifier = UrlVerifier(is_government=registry.is_government_url)
    try:
        yield verifier
    finally:
        await verifier.close()


def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    registry: DomainRegistry = Depends(get_registry),
    search_client: AISearchClient = Depends(get_search_client),
    verifier: UrlVerifier = Depends(get_verifier),
) -> CitationOrchestrator:
    return CitationOrchestrator(
        registry=registry,
        search_client=search_client,
        verifier=verifier,
        rotation=DomainRotationTracker(db, registry),
    )


def get_management_service(
    db: AsyncSession = Depends(get_db),
    registry: DomainRegistry = Depends(get_registry),
    verifier: UrlVerifier = Depends(get_verifier),
) -> CitationManagementService:
    return CitationManagementService(db, registry, verifier)


def get_compliance_service(
    db: AsyncSession = Depends(get_db),
    registry: DomainRegistry = Depends(get_registry),
    verifier: UrlVerifier = Depends(get_verifier),
) -> ComplianceService:
    return ComplianceService(db, ComplianceAuditor(registry), verifier=verifier)
