"""Domain registry endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ....database.repositories.domain_repository import DomainRepository
from ....database.session import get_db
from ....domains.registry import DomainRegistry
from ....utils.url_utils import extract_domain
from ..dependencies import get_registry
from ..schemas import DomainCheckResponse, DomainSyncResponse

router = APIRouter(prefix="/v1/domains", tags=["domains"])


@router.get("/check", response_model=DomainCheckResponse)
async def check_url(
    url: str = Query(..., min_length=1, description="URL to classify"),
    registry: DomainRegistry = Depends(get_registry),
) -> DomainCheckResponse:
    entry = registry.match(url)
    return DomainCheckResponse(
        url=url,
        domain=extract_domain(url),
        approved=entry is not None,
        competitor=registry.is_competitor(url),
        competitor_reason=registry.competitor_reason(url),
        category=entry.category.value if entry else None,
        tier=entry.tier.value if entry else None,
        government=registry.is_government_url(url),
    )


@router.post("/sync", response_model=DomainSyncResponse)
async def sync_domains(
    db: AsyncSession = Depends(get_db),
    registry: DomainRegistry = Depends(get_registry),
) -> DomainSyncResponse:
    """Bulk-load the registry into the approved/competitor domain tables."""
    repository = DomainRepository(db)
    approved = await repository.upsert_approved(registry.entries)
    competitors = await repository.upsert_competitors(registry.competitors)
    await db.commit()
    return DomainSyncResponse(approved_domains=approved, competitor_domains=competitors)
