"""Compliance scan and report endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from ....models.compliance import ArticleScan, ComplianceReport, ScanSummary
from ....services.compliance_auditor import ComplianceService
from ..dependencies import get_compliance_service

router = APIRouter(prefix="/v1/compliance", tags=["compliance"])


@router.post("/scan", response_model=ScanSummary)
async def run_scan(
    service: ComplianceService = Depends(get_compliance_service),
) -> ScanSummary:
    """Scan all published articles and refresh their unresolved alerts."""
    return await service.run_scan()


@router.get("/report", response_model=ComplianceReport)
async def get_report(
    service: ComplianceService = Depends(get_compliance_service),
) -> ComplianceReport:
    return await service.build_report()


@router.get("/articles/{article_id}", response_model=ArticleScan)
async def scan_article(
    article_id: uuid.UUID,
    service: ComplianceService = Depends(get_compliance_service),
) -> ArticleScan:
    """Scan one article without changing stored alerts."""
    return await service.scan_article(article_id)
