"""Compliance scan and report models."""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, Field


class AlertType(str, Enum):
    COMPETITOR = "competitor"
    NON_APPROVED = "non_approved"
    BROKEN_LINK = "broken_link"
    MISSING_GOV_SOURCE = "missing_gov_source"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ComplianceViolation(BaseModel):
    """A detected policy violation for one article.

    ``citation_url`` is empty for article-level findings (missing_gov_source).
    """

    article_id: uuid.UUID | None = None
    article_title: str = ""
    alert_type: AlertType
    severity: Severity
    citation_url: str = ""
    domain: str = ""
    message: str = ""

    model_config = {"frozen": True}

    @property
    def key(self) -> tuple[str, str, str]:
        """Uniqueness key of an unresolved alert."""
        return (str(self.article_id), self.citation_url, self.alert_type.value)


class ArticleScan(BaseModel):
    """Scan result for one article."""

    article_id: uuid.UUID | None = None
    article_title: str = ""
    citation_urls: list[str] = Field(default_factory=list)
    has_government_source: bool = False
    violations: list[ComplianceViolation] = Field(default_factory=list)


class CategoryCount(BaseModel):
    count: int = 0
    percentage: float = 0.0


class DomainOffense(BaseModel):
    domain: str
    count: int
    alert_type: AlertType


class CitationHealth(BaseModel):
    """Liveness counts over the citations covered by a report."""

    healthy: int = 0
    broken: int = 0
    unverified: int = 0
    unchecked: int = 0


class ComplianceReport(BaseModel):
    """Aggregate compliance report over a set of articles."""

    total_articles: int = 0
    total_citations: int = 0
    approved_citations: int = 0
    non_approved_citations: int = 0
    competitor_citations: int = 0
    government_citations: int = 0
    government_source_percentage: float = 0.0
    compliance_score: int = Field(default=100, ge=0, le=100)
    by_category: dict[str, CategoryCount] = Field(default_factory=dict)
    top_offending_domains: list[DomainOffense] = Field(default_factory=list)
    health: CitationHealth = Field(default_factory=CitationHealth)
    recommendations: list[str] = Field(default_factory=list)
    violations: list[ComplianceViolation] = Field(default_factory=list)
    active_alerts: int = 0
    total_approved_domains: int = 0


class ScanSummary(BaseModel):
    """Outcome of a compliance scan pass."""

    articles_checked: int = 0
    alerts_created: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
