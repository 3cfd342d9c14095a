"""Tests for article, revision, alert and domain repositories (SQLite)."""

from __future__ import annotations

import uuid

import pytest

from citation_engine.core.exceptions import ArticleNotFoundError
from citation_engine.database.models import BlogArticle
from citation_engine.database.repositories import (
    ArticleRepository,
    ComplianceAlertRepository,
    DomainRepository,
    RevisionRepository,
    to_article,
)
from citation_engine.domains.registry import DomainRegistry
from citation_engine.models.compliance import AlertType, ComplianceViolation, Severity
from citation_engine.models.domain import (
    CompetitorEntry,
    DomainCategory,
    DomainRegistryEntry,
    SearchTier,
)


def _violation(article_id: uuid.UUID, url: str, alert_type: AlertType = AlertType.COMPETITOR):
    return ComplianceViolation(
        article_id=article_id,
        article_title="Property tax changes 2024",
        alert_type=alert_type,
        severity=Severity.CRITICAL,
        citation_url=url,
        domain="idealista.com",
        message="Competitor citation: Real estate competitor",
    )


@pytest.mark.unit
class TestArticleRepository:
    @pytest.mark.asyncio
    async def test_get_or_raise_unknown_article(self, async_db_session):
        with pytest.raises(ArticleNotFoundError):
            await ArticleRepository(async_db_session).get_or_raise(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_by_status(self, async_db_session, make_article):
        published = await make_article()
        await make_article(status="draft")
        repo = ArticleRepository(async_db_session)

        assert [a.id for a in await repo.list_by_status()] == [published.id]
        assert len(await repo.list_by_status(None)) == 2

    @pytest.mark.asyncio
    async def test_update_citations_stamps_modification(self, async_db_session, make_article):
        article = await make_article()
        repo = ArticleRepository(async_db_session)

        await repo.update_citations(
            article,
            [{"url": "https://www.boe.es/doc", "source": "BOE", "authorityScore": 80}],
            content="<p>New body</p>",
        )

        model = to_article(article)
        assert model.detailed_content == "<p>New body</p>"
        assert model.external_citations[0].authority_score == 80
        assert article.date_modified is not None

    def test_to_article_skips_entries_without_url(self):
        row = BlogArticle(
            id=uuid.uuid4(),
            headline="Headline",
            detailed_content="",
            language="en",
            status="published",
            external_citations=[{"url": "https://boe.es"}, {"source": "no url"}, "junk"],
        )
        assert [c.url for c in to_article(row).external_citations] == ["https://boe.es"]


@pytest.mark.unit
class TestRevisionRepository:
    @pytest.mark.asyncio
    async def test_backup_snapshots_current_state(self, async_db_session, make_article):
        article = await make_article(external_citations=[{"url": "https://www.boe.es/doc"}])
        repo = RevisionRepository(async_db_session)

        revision = await repo.create_backup(
            article, "citation_replacement", "Replace broken link", rollback_hours=24,
            replaced_url="https://www.boe.es/doc", replacement_url="https://www.boe.es/new",
        )

        assert revision.previous_content == article.detailed_content
        assert revision.previous_citations == [{"url": "https://www.boe.es/doc"}]
        assert revision.can_rollback is True
        assert revision.rollback_expires_at > revision.created_at
        assert [r.id for r in await repo.list_for_article(article.id)] == [revision.id]

        await repo.mark_rolled_back(revision)
        assert revision.can_rollback is False
        assert revision.rolled_back_at is not None


@pytest.mark.unit
class TestComplianceAlertRepository:
    @pytest.mark.asyncio
    async def test_replace_unresolved_is_idempotent(self, async_db_session, make_article):
        """
        Given: The same violations are stored twice (and listed twice in one batch)
        When: Unresolved alerts are counted
        Then: Only one alert per (article, url, type) exists
        """
        article = await make_article()
        repo = ComplianceAlertRepository(async_db_session)
        violations = [
            _violation(article.id, "https://idealista.com/a"),
            _violation(article.id, "https://idealista.com/a"),
            _violation(article.id, "", AlertType.MISSING_GOV_SOURCE),
        ]

        await repo.replace_unresolved(article.id, violations)
        await repo.replace_unresolved(article.id, violations)

        assert await repo.count_unresolved() == 2

    @pytest.mark.asyncio
    async def test_resolve_removes_alert_from_unresolved(self, async_db_session, make_article):
        article = await make_article()
        repo = ComplianceAlertRepository(async_db_session)
        await repo.replace_unresolved(article.id, [_violation(article.id, "https://idealista.com/a")])

        assert await repo.resolve(article.id, "https://idealista.com/a") == 1
        assert await repo.list_unresolved(article.id) == []
        assert await repo.resolve(article.id, "https://idealista.com/a") == 0


@pytest.mark.unit
class TestDomainRepository:
    @pytest.mark.asyncio
    async def test_upsert_and_load(self, async_db_session):
        repo = DomainRepository(async_db_session)
        entry = DomainRegistryEntry(
            domain="boe.es",
            category=DomainCategory.GOVERNMENT_OFFICIAL,
            tier=SearchTier.S,
            trust_score=100,
        )
        await repo.upsert_approved([entry])
        await repo.upsert_competitors([CompetitorEntry(domain="idealista.com")])

        entries, competitors = await repo.load_entries()
        assert entries == [entry]
        assert competitors == [CompetitorEntry(domain="idealista.com")]

        # Second upsert updates in place and invalidates the cache
        await repo.upsert_approved([entry.model_copy(update={"tier": SearchTier.A, "trust_score": 90})])
        entries, _ = await repo.load_entries()
        assert len(entries) == 1
        assert entries[0].tier == SearchTier.A

    @pytest.mark.asyncio
    async def test_registry_built_from_storage(self, async_db_session):
        """
        Given: The registry bulk-loaded into storage
        When: A registry is rebuilt from the stored rows
        Then: It answers approval and competitor lookups like the static one
        """
        repo = DomainRepository(async_db_session)
        await repo.upsert_approved(
            [
                DomainRegistryEntry(
                    domain="boe.es",
                    category=DomainCategory.GOVERNMENT_OFFICIAL,
                    tier=SearchTier.S,
                    trust_score=100,
                )
            ]
        )
        await repo.upsert_competitors([CompetitorEntry(domain="idealista.com")])

        entries, competitors = await repo.load_entries()
        registry = DomainRegistry.from_entries(entries, competitors)

        assert registry.is_approved_domain("https://www.boe.es/buscar/doc.php")
        assert registry.get_domain_category("https://boe.es/") == DomainCategory.GOVERNMENT_OFFICIAL
        assert registry.is_competitor("https://www.idealista.com/en/")
        assert not registry.is_approved_domain("https://idealista.com/")
