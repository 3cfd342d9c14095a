"""Fixtures for API tests: the app with its database and services overridden."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from citation_engine.api.v1.dependencies import (
    get_compliance_service,
    get_management_service,
    get_orchestrator,
)
from citation_engine.database.session import get_db
from citation_engine.main import app
from citation_engine.services.citation_management import CitationManagementService
from citation_engine.services.citation_orchestrator import CitationOrchestrator
from citation_engine.services.compliance_auditor import ComplianceService


@pytest.fixture
def mock_db() -> AsyncMock:
    """Session stand-in; ``db.get`` returns None unless a test sets it."""
    db = AsyncMock()
    db.add = MagicMock()
    db.get.return_value = None
    return db


@pytest.fixture
def mock_orchestrator() -> MagicMock:
    orchestrator = MagicMock(spec=CitationOrchestrator)
    orchestrator.find_citations = AsyncMock()
    return orchestrator


@pytest.fixture
def mock_management() -> MagicMock:
    management = MagicMock(spec=CitationManagementService)
    for name in (
        "attach_citations",
        "replace_citation",
        "remove_banned_citations",
        "rollback_revision",
    ):
        setattr(management, name, AsyncMock())
    return management


@pytest.fixture
def mock_compliance() -> MagicMock:
    service = MagicMock(spec=ComplianceService)
    for name in ("run_scan", "build_report", "scan_article"):
        setattr(service, name, AsyncMock())
    return service


@pytest.fixture
def client(
    mock_db: AsyncMock,
    mock_orchestrator: MagicMock,
    mock_management: MagicMock,
    mock_compliance: MagicMock,
) -> Iterator[TestClient]:
    """TestClient with database and services replaced by mocks."""

    async def _db() -> AsyncGenerator[AsyncMock, None]:
        yield mock_db

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    app.dependency_overrides[get_management_service] = lambda: mock_management
    app.dependency_overrides[get_compliance_service] = lambda: mock_compliance
    yield TestClient(app)
    app.dependency_overrides.clear()
