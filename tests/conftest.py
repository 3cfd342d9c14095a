"""Pytest configuration for tests."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Sequence
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from citation_engine.database.models import Base, BlogArticle
from citation_engine.database.session import build_engine, build_session_factory
from citation_engine.domains.registry import DomainRegistry
from citation_engine.models.citation import VerificationResult, VerificationStatus
from citation_engine.models.domain import (
    CompetitorEntry,
    DomainCategory,
    DomainRegistryEntry,
    SearchTier,
)
from citation_engine.services.search.base import AISearchRequest

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """In-memory SQLite engine with the full schema."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def async_db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session for a single test."""
    async with build_session_factory(async_engine)() as session:
        yield session


def _entry(domain: str, category: DomainCategory, tier: SearchTier) -> DomainRegistryEntry:
    return DomainRegistryEntry(
        domain=domain, category=category, tier=tier, trust_score=tier.trust_score
    )


@pytest.fixture
def small_registry() -> DomainRegistry:
    """Three-tier registry: government (S), legal (A), news (B)."""
    return DomainRegistry(
        entries=[
            _entry("boe.es", DomainCategory.GOVERNMENT_OFFICIAL, SearchTier.S),
            _entry("agenciatributaria.es", DomainCategory.GOVERNMENT_OFFICIAL, SearchTier.S),
            _entry("example.gob.es", DomainCategory.GOVERNMENT_OFFICIAL, SearchTier.S),
            _entry("notariado.org", DomainCategory.LEGAL_PROFESSIONAL, SearchTier.A),
            _entry("registradores.org", DomainCategory.LEGAL_PROFESSIONAL, SearchTier.A),
            _entry("surinenglish.com", DomainCategory.NEWS_MEDIA, SearchTier.B),
            _entry("theolivepress.es", DomainCategory.NEWS_MEDIA, SearchTier.B),
            _entry("ikea.com/es", DomainCategory.SHOPPING, SearchTier.B),
        ],
        competitors=[
            CompetitorEntry(domain="idealista.com"),
            CompetitorEntry(domain="kyero.com", reason="International property portal (competitor)"),
        ],
    )


class ScriptedSearchClient:
    """AI search client returning scripted responses (or raising scripted errors) in order."""

    def __init__(self, responses: Sequence[Any]) -> None:
        self.responses = list(responses)
        self.requests: list[AISearchRequest] = []

    async def search(self, request: AISearchRequest) -> str:
        self.requests.append(request)
        if not self.responses:
            return "[]"
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class StubVerifier:
    """Verifier classifying URLs from a lookup table (verified by default)."""

    def __init__(self, statuses: dict[str, VerificationStatus] | None = None) -> None:
        self.statuses = statuses or {}
        self.verified_urls: list[str] = []

    async def verify(self, url: str, original_url: str | None = None) -> VerificationResult:
        self.verified_urls.append(url)
        status = self.statuses.get(url, VerificationStatus.VERIFIED)
        return VerificationResult(
            url=url,
            verified=status == VerificationStatus.VERIFIED,
            status_code=200 if status == VerificationStatus.VERIFIED else 404,
            verification_status=status,
        )

    async def verify_many(self, urls: Sequence[str]) -> list[VerificationResult]:
        return [await self.verify(url) for url in urls]


@pytest.fixture
def stub_verifier() -> StubVerifier:
    return StubVerifier()


@pytest_asyncio.fixture
async def make_article(async_db_session: AsyncSession):
    """Factory inserting a BlogArticle row."""

    async def _make(**fields: Any) -> BlogArticle:
        defaults: dict[str, Any] = {
            "id": uuid.uuid4(),
            "slug": f"article-{uuid.uuid4().hex[:8]}",
            "headline": "Property tax changes 2024",
            "detailed_content": "<p>Buyers must pay the transfer tax.</p>",
            "language": "en",
            "funnel_stage": "BOFU",
            "status": "published",
            "external_citations": [],
        }
        defaults.update(fields)
        article = BlogArticle(**defaults)
        async_db_session.add(article)
        await async_db_session.commit()
        return article

    return _make


@pytest.fixture
def scripted_search() -> type[ScriptedSearchClient]:
    """The scripted AI search client class (instantiate with a response list)."""
    return ScriptedSearchClient
