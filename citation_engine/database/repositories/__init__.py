"""Database repositories."""

from .article_repository import ArticleRepository, RevisionRepository, to_article
from .citation_usage_repository import CitationUsageRepository
from .compliance_alert_repository import ComplianceAlertRepository
from .domain_repository import DomainRepository

__all__ = [
    "ArticleRepository",
    "CitationUsageRepository",
    "ComplianceAlertRepository",
    "DomainRepository",
    "RevisionRepository",
    "to_article",
]
