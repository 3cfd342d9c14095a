"""Citation compliance auditing.

``ComplianceAuditor`` is pure: it scans articles and aggregates reports
against a registry. ``ComplianceService`` adds persistence: it loads
published articles, checks link health with the URL verifier, and upserts
alerts so repeated scans are idempotent.
"""

from __future__ import annotations

import math
import uuid
from collections import Counter
from collections.abc import Iterable, Mapping

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..database.repositories.article_repository import ArticleRepository, to_article
from ..database.repositories.compliance_alert_repository import ComplianceAlertRepository
from ..domains.registry import DomainRegistry
from ..models.article import Article
from ..models.citation import VerificationStatus
from ..models.compliance import (
    AlertType,
    ArticleScan,
    CategoryCount,
    CitationHealth,
    ComplianceReport,
    ComplianceViolation,
    DomainOffense,
    ScanSummary,
    Severity,
)
from ..utils.html_links import extract_hrefs
from ..utils.url_utils import extract_domain, is_http_url
from .verification.url_verifier import UrlVerifier

logger = structlog.get_logger(__name__)

TOP_OFFENDERS_LIMIT = 10


def compliance_score(approved: int, competitor: int, total: int) -> int:
    """``round((approved - competitor) / total * 100)`` clamped to [0, 100]; 100 when empty."""
    if total <= 0:
        return 100
    raw = math.floor((approved - competitor) / total * 100 + 0.5)
    return max(0, min(100, raw))


class ComplianceAuditor:
    """Detects competitor and non-approved citations in articles.

    Example:
        >>> auditor = ComplianceAuditor(get_default_registry())
        >>> scan = auditor.scan_article(article)
        >>> [v.alert_type for v in scan.violations]
        [<AlertType.COMPETITOR: 'competitor'>]
    """

    def __init__(
        self,
        registry: DomainRegistry,
        site_domain: str | None = None,
        gov_source_threshold: float | None = None,
        max_report_violations: int | None = None,
    ):
        self.registry = registry
        self.site_domain = (site_domain or settings.COMPLIANCE_SITE_DOMAIN).lower()
        self.gov_source_threshold = (
            settings.COMPLIANCE_GOV_SOURCE_THRESHOLD
            if gov_source_threshold is None
            else gov_source_threshold
        )
        self.max_report_violations = (
            max_report_violations or settings.COMPLIANCE_MAX_REPORT_VIOLATIONS
        )

    def citation_urls(self, article: Article) -> list[str]:
        """External URLs cited by the article: HTML links then structured citations.

        Relative links and links to the site itself are skipped; duplicates
        are reported once.
        """
        urls: list[str] = []
        for href in extract_hrefs(article.detailed_content):
            if not is_http_url(href) or self._is_internal(href):
                continue
            urls.append(href)
        urls.extend(c.url for c in article.external_citations if c.url)
        return list(dict.fromkeys(urls))

    def scan_article(self, article: Article) -> ArticleScan:
        """Classify every cited URL of one article.

        Competitors are critical, non-approved domains are warnings, and an
        article citing no government source gets one info-level finding.
        """
        urls = self.citation_urls(article)
        violations: list[ComplianceViolation] = []
        has_government = False

        for url in urls:
            domain = extract_domain(url)
            if self.registry.is_competitor(url):
                violations.append(
                    self._violation(
                        article,
                        AlertType.COMPETITOR,
                        Severity.CRITICAL,
                        url,
                        f"Competitor citation: {self.registry.competitor_reason(url)}",
                    )
                )
            elif not self.registry.is_approved_domain(url):
                violations.append(
                    self._violation(
                        article,
                        AlertType.NON_APPROVED,
                        Severity.WARNING,
                        url,
                        f"{domain or url} is not an approved domain",
                    )
                )
            if self.registry.is_government_url(url):
                has_government = True

        if urls and not has_government:
            violations.append(
                self._violation(
                    article,
                    AlertType.MISSING_GOV_SOURCE,
                    Severity.INFO,
                    "",
                    "Article cites no government or official source",
                )
            )

        return ArticleScan(
            article_id=article.id,
            article_title=article.headline,
            citation_urls=urls,
            has_government_source=has_government,
            violations=violations,
        )

    def broken_link_violations(
        self, article: Article, health: Mapping[str, VerificationStatus]
    ) -> list[ComplianceViolation]:
        """Warnings for cited URLs whose last verification failed."""
        return [
            self._violation(
                article, AlertType.BROKEN_LINK, Severity.WARNING, url, "Citation URL is broken"
            )
            for url in self.citation_urls(article)
            if health.get(url) == VerificationStatus.FAILED
        ]

    def build_compliance_report(
        self,
        articles: Iterable[Article],
        health: Mapping[str, VerificationStatus] | None = None,
        active_alerts: int = 0,
    ) -> ComplianceReport:
        """Aggregate compliance metrics over a corpus.

        Args:
            articles: Articles to include
            health: Last known verification status per URL (optional)
            active_alerts: Count of unresolved stored alerts

        Returns:
            ComplianceReport
        """
        health = health or {}
        total = approved = non_approved = competitor = government = 0
        categories: Counter[str] = Counter()
        offenders: Counter[tuple[str, AlertType]] = Counter()
        citation_health = CitationHealth()
        violations: list[ComplianceViolation] = []
        article_count = 0

        for article in articles:
            article_count += 1
            scan = self.scan_article(article)
            for url in scan.citation_urls:
                total += 1
                domain = extract_domain(url) or url
                if self.registry.is_competitor(url):
                    competitor += 1
                    offenders[(domain, AlertType.COMPETITOR)] += 1
                elif self.registry.is_approved_domain(url):
                    approved += 1
                    category = self.registry.get_domain_category(url)
                    if category is not None:
                        categories[category.value] += 1
                    if self.registry.is_government_url(url):
                        government += 1
                else:
                    non_approved += 1
                    offenders[(domain, AlertType.NON_APPROVED)] += 1

                status = health.get(url)
                if status is None:
                    citation_health.unchecked += 1
                elif status == VerificationStatus.VERIFIED:
                    citation_health.healthy += 1
                elif status == VerificationStatus.FAILED:
                    citation_health.broken += 1
                else:
                    citation_health.unverified += 1

            violations.extend(scan.violations)
            violations.extend(self.broken_link_violations(article, health))

        score = compliance_score(approved, competitor, total)
        gov_percentage = round(government / total * 100, 1) if total else 0.0

        report = ComplianceReport(
            total_articles=article_count,
            total_citations=total,
            approved_citations=approved,
            non_approved_citations=non_approved,
            competitor_citations=competitor,
            government_citations=government,
            government_source_percentage=gov_percentage,
            compliance_score=score,
            by_category={
                name: CategoryCount(count=count, percentage=round(count / total * 100, 1))
                for name, count in categories.most_common()
            },
            top_offending_domains=[
                DomainOffense(domain=domain, count=count, alert_type=alert_type)
                for (domain, alert_type), count in offenders.most_common(TOP_OFFENDERS_LIMIT)
            ],
            health=citation_health,
            recommendations=self._recommendations(
                total, non_approved, competitor, government, citation_health.broken, score
            ),
            violations=violations[: self.max_report_violations],
            active_alerts=active_alerts,
            total_approved_domains=len(self.registry.get_all_approved_domains()),
        )

        logger.info(
            "compliance_report_built",
            articles=article_count,
            citations=total,
            compliance_score=score,
            government_percentage=gov_percentage,
        )
        return report

    def _recommendations(
        self,
        total: int,
        non_approved: int,
        competitor: int,
        government: int,
        broken: int,
        score: int,
    ) -> list[str]:
        recommendations = []
        if competitor:
            recommendations.append(f"Remove {competitor} competitor citations immediately")
        if non_approved:
            recommendations.append(
                f"Replace {non_approved} non-approved citations with approved domains"
            )
        gov_percentage = government / total * 100 if total else 0.0
        if total and gov_percentage < self.gov_source_threshold:
            needed = math.ceil(total * self.gov_source_threshold / 100 - government)
            recommendations.append(
                f"Add {needed} more government sources to reach "
                f"{self.gov_source_threshold:g}% (currently {gov_percentage:.1f}%)"
            )
        if broken:
            recommendations.append(f"Fix {broken} broken citations")
        if score < 90:
            recommendations.append(f"Improve compliance score from {score}% to 90%+")
        return recommendations

    def _is_internal(self, url: str) -> bool:
        host = extract_domain(url)
        return host == self.site_domain or host.endswith("." + self.site_domain)

    @staticmethod
    def _violation(
        article: Article,
        alert_type: AlertType,
        severity: Severity,
        url: str,
        message: str,
    ) -> ComplianceViolation:
        return ComplianceViolation(
            article_id=article.id,
            article_title=article.headline,
            alert_type=alert_type,
            severity=severity,
            citation_url=url,
            domain=extract_domain(url) if url else "",
            message=message,
        )


class ComplianceService:
    """Runs compliance scans over stored articles and persists alerts."""

    def __init__(
        self,
        db: AsyncSession,
        auditor: ComplianceAuditor,
        verifier: UrlVerifier | None = None,
    ) -> None:
        self.db = db
        self.auditor = auditor
        self.verifier = verifier
        self.articles = ArticleRepository(db)
        self.alerts = ComplianceAlertRepository(db)

    async def run_scan(
        self, health: Mapping[str, VerificationStatus] | None = None
    ) -> ScanSummary:
        """Scan every published article and replace its unresolved alerts.

        Running twice on an unchanged corpus leaves the same alert set.
        Without a ``health`` map, cited URLs are verified first when the
        service has a verifier.
        """
        rows = await self.articles.list_by_status("published")
        articles = [to_article(row) for row in rows]
        if health is None:
            health = await self.check_health(articles)
        by_type: Counter[str] = Counter()
        created = 0

        for row, article in zip(rows, articles):
            violations = list(self.auditor.scan_article(article).violations)
            if health:
                violations.extend(self.auditor.broken_link_violations(article, health))
            records = await self.alerts.replace_unresolved(row.id, violations)
            created += len(records)
            by_type.update(record.alert_type for record in records)

        await self.db.commit()
        summary = ScanSummary(
            articles_checked=len(rows), alerts_created=created, by_type=dict(by_type)
        )
        logger.info(
            "compliance_scan_complete",
            articles=summary.articles_checked,
            alerts=summary.alerts_created,
            by_type=summary.by_type,
        )
        return summary

    async def build_report(
        self, health: Mapping[str, VerificationStatus] | None = None
    ) -> ComplianceReport:
        rows = await self.articles.list_by_status("published")
        articles = [to_article(row) for row in rows]
        if health is None:
            health = await self.check_health(articles)
        active = await self.alerts.count_unresolved()
        return self.auditor.build_compliance_report(
            articles, health=health, active_alerts=active
        )

    async def check_health(
        self, articles: Iterable[Article]
    ) -> dict[str, VerificationStatus]:
        """Verification status of every URL cited across ``articles``.

        Empty when the service has no verifier.
        """
        if self.verifier is None:
            return {}
        urls = list(
            dict.fromkeys(url for article in articles for url in self.auditor.citation_urls(article))
        )
        if not urls:
            return {}
        results = await self.verifier.verify_many(urls)
        health = {url: result.verification_status for url, result in zip(urls, results)}
        logger.info(
            "citation_health_checked",
            urls=len(urls),
            broken=sum(1 for s in health.values() if s == VerificationStatus.FAILED),
        )
        return health

    async def scan_article(self, article_id: uuid.UUID) -> ArticleScan:
        """Scan one stored article without touching its alerts.

        Raises:
            ArticleNotFoundError: If the article does not exist
        """
        row = await self.articles.get_or_raise(article_id)
        return self.auditor.scan_article(to_article(row))
