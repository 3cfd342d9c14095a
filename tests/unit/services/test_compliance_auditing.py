"""Tests for the compliance auditor and the persisted compliance scan."""

from __future__ import annotations

import uuid

import pytest

from citation_engine.core.exceptions import ArticleNotFoundError
from citation_engine.database.repositories import ComplianceAlertRepository
from citation_engine.models.article import Article
from citation_engine.models.citation import ExternalCitation, VerificationStatus
from citation_engine.models.compliance import AlertType, Severity
from citation_engine.services.compliance_auditor import (
    ComplianceAuditor,
    ComplianceService,
    compliance_score,
)

MIXED_CONTENT = (
    '<p>See <a href="https://www.boe.es/doc">the BOE</a>, '
    '<a href="https://www.idealista.com/venta">a portal</a>, '
    '<a href="https://random.example.com/post">a blog</a>, '
    '<a href="https://www.delsolprimehomes.com/blog/other">our guide</a>, '
    '<a href="/about">about us</a> and <a href="https://www.boe.es/doc">the BOE again</a>.</p>'
)


def _article(content: str = "", citations: tuple[str, ...] = ()) -> Article:
    return Article(
        id=uuid.uuid4(),
        headline="Buying property in Spain",
        detailed_content=content,
        external_citations=[ExternalCitation(url=url) for url in citations],
    )


@pytest.fixture
def auditor(small_registry) -> ComplianceAuditor:
    return ComplianceAuditor(small_registry, site_domain="delsolprimehomes.com")


@pytest.mark.unit
class TestComplianceScore:
    @pytest.mark.parametrize(
        "approved, competitor, total, expected",
        [(0, 0, 0, 100), (5, 0, 5, 100), (2, 3, 5, 0), (1, 0, 8, 13), (3, 1, 5, 40)],
    )
    def test_formula(self, approved: int, competitor: int, total: int, expected: int):
        assert compliance_score(approved, competitor, total) == expected


@pytest.mark.unit
class TestScanArticle:
    def test_classifies_each_cited_url(self, auditor: ComplianceAuditor):
        """
        Given: An article linking to approved, competitor, unknown and internal pages
        When: It is scanned
        Then: The competitor is critical, the unknown domain a warning, internal links ignored
        """
        article = _article(MIXED_CONTENT, citations=("https://www.surinenglish.com/a",))

        scan = auditor.scan_article(article)

        assert scan.citation_urls == [
            "https://www.boe.es/doc",
            "https://www.idealista.com/venta",
            "https://random.example.com/post",
            "https://www.surinenglish.com/a",
        ]
        assert scan.has_government_source is True
        competitor, non_approved = scan.violations
        assert competitor.alert_type == AlertType.COMPETITOR
        assert competitor.severity == Severity.CRITICAL
        assert competitor.message == "Competitor citation: Real estate competitor"
        assert competitor.domain == "idealista.com"
        assert non_approved.alert_type == AlertType.NON_APPROVED
        assert non_approved.severity == Severity.WARNING

    def test_missing_government_source(self, auditor: ComplianceAuditor):
        scan = auditor.scan_article(_article(citations=("https://www.surinenglish.com/a",)))

        (violation,) = scan.violations
        assert violation.alert_type == AlertType.MISSING_GOV_SOURCE
        assert violation.severity == Severity.INFO
        assert violation.citation_url == ""

    def test_article_without_citations_is_clean(self, auditor: ComplianceAuditor):
        assert auditor.scan_article(_article("<p>No links here.</p>")).violations == []

    def test_broken_link_violations(self, auditor: ComplianceAuditor):
        article = _article(citations=("https://www.boe.es/a", "https://www.boe.es/b"))

        (violation,) = auditor.broken_link_violations(
            article, {"https://www.boe.es/b": VerificationStatus.FAILED}
        )

        assert violation.alert_type == AlertType.BROKEN_LINK
        assert violation.citation_url == "https://www.boe.es/b"


@pytest.mark.unit
class TestComplianceReport:
    def test_aggregates_corpus(self, auditor: ComplianceAuditor):
        articles = [
            _article(MIXED_CONTENT, citations=("https://www.surinenglish.com/a",)),
            _article(citations=("https://www.theolivepress.es/b",)),
        ]
        health = {
            "https://www.boe.es/doc": VerificationStatus.VERIFIED,
            "https://www.surinenglish.com/a": VerificationStatus.FAILED,
        }

        report = auditor.build_compliance_report(articles, health=health, active_alerts=7)

        assert report.total_articles == 2
        assert report.total_citations == 5
        assert report.approved_citations == 3
        assert report.competitor_citations == 1
        assert report.non_approved_citations == 1
        assert report.government_citations == 1
        assert report.government_source_percentage == 20.0
        assert report.compliance_score == 40
        assert list(report.by_category) == ["news_media", "government_official"]
        assert report.by_category["news_media"].percentage == 40.0
        assert [(o.domain, o.alert_type) for o in report.top_offending_domains] == [
            ("idealista.com", AlertType.COMPETITOR),
            ("random.example.com", AlertType.NON_APPROVED),
        ]
        assert (report.health.healthy, report.health.broken, report.health.unchecked) == (1, 1, 3)
        assert report.recommendations == [
            "Remove 1 competitor citations immediately",
            "Replace 1 non-approved citations with approved domains",
            "Fix 1 broken citations",
            "Improve compliance score from 40% to 90%+",
        ]
        assert [v.alert_type for v in report.violations] == [
            AlertType.COMPETITOR,
            AlertType.NON_APPROVED,
            AlertType.BROKEN_LINK,
            AlertType.MISSING_GOV_SOURCE,
        ]
        assert report.active_alerts == 7
        assert report.total_approved_domains == 8

    def test_recommends_more_government_sources(self, auditor: ComplianceAuditor):
        urls = tuple(f"https://www.surinenglish.com/{i}" for i in range(10))

        report = auditor.build_compliance_report([_article(citations=urls)])

        assert report.compliance_score == 100
        assert report.recommendations == [
            "Add 1 more government sources to reach 10% (currently 0.0%)"
        ]

    def test_empty_corpus(self, auditor: ComplianceAuditor):
        report = auditor.build_compliance_report([])
        assert report.compliance_score == 100
        assert report.recommendations == []

    def test_violation_list_is_capped(self, small_registry):
        auditor = ComplianceAuditor(small_registry, max_report_violations=1)
        report = auditor.build_compliance_report([_article(MIXED_CONTENT)])
        assert len(report.violations) == 1


@pytest.mark.unit
class TestComplianceService:
    @pytest.mark.asyncio
    async def test_repeated_scans_leave_identical_alerts(
        self, async_db_session, auditor: ComplianceAuditor, make_article
    ):
        await make_article(detailed_content=MIXED_CONTENT)
        await make_article(
            status="draft", detailed_content='<a href="https://www.idealista.com/x">x</a>'
        )
        service = ComplianceService(async_db_session, auditor)
        alerts = ComplianceAlertRepository(async_db_session)

        first = await service.run_scan()
        first_keys = {(a.citation_url, a.alert_type) for a in await alerts.list_unresolved()}
        second = await service.run_scan()
        second_keys = {(a.citation_url, a.alert_type) for a in await alerts.list_unresolved()}

        assert first.articles_checked == 1
        assert first.alerts_created == second.alerts_created == 2
        assert first.by_type == {"competitor": 1, "non_approved": 1}
        assert first_keys == second_keys
        assert await alerts.count_unresolved() == 2

    @pytest.mark.asyncio
    async def test_scan_with_health_adds_broken_links(
        self, async_db_session, auditor: ComplianceAuditor, make_article
    ):
        await make_article(external_citations=[{"url": "https://www.boe.es/gone"}])
        service = ComplianceService(async_db_session, auditor)

        summary = await service.run_scan(health={"https://www.boe.es/gone": VerificationStatus.FAILED})

        assert summary.by_type == {"broken_link": 1}

    @pytest.mark.asyncio
    async def test_scan_verifies_links_when_no_health_given(
        self, async_db_session, auditor: ComplianceAuditor, make_article, stub_verifier
    ):
        """
        Given: A published article citing a dead government URL
        When: The scan runs with a verifier and no precomputed health map
        Then: The dead link is verified and stored as a broken_link alert
        """
        dead = "https://www.boe.es/definitely-404"
        stub_verifier.statuses[dead] = VerificationStatus.FAILED
        await make_article(
            detailed_content=f'<p>See <a href="{dead}">the BOE</a>.</p>',
            external_citations=[{"url": dead}, {"url": "https://www.boe.es/alive"}],
        )
        service = ComplianceService(async_db_session, auditor, verifier=stub_verifier)

        summary = await service.run_scan()
        report = await service.build_report()

        assert summary.by_type == {"broken_link": 1}
        assert stub_verifier.verified_urls[:2] == [dead, "https://www.boe.es/alive"]
        assert report.health.broken == 1
        assert report.health.healthy == 1
        assert report.health.unchecked == 0

    @pytest.mark.asyncio
    async def test_report_counts_active_alerts(
        self, async_db_session, auditor: ComplianceAuditor, make_article
    ):
        await make_article(detailed_content=MIXED_CONTENT)
        service = ComplianceService(async_db_session, auditor)
        await service.run_scan()

        report = await service.build_report()

        assert report.active_alerts == 2
        assert report.total_articles == 1

    @pytest.mark.asyncio
    async def test_scan_unknown_article(self, async_db_session, auditor: ComplianceAuditor):
        with pytest.raises(ArticleNotFoundError):
            await ComplianceService(async_db_session, auditor).scan_article(uuid.uuid4())
