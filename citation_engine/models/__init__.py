"""Domain models for the citation engine."""

from .article import Article, ArticleAnalysis, CitationOpportunity
from .citation import (
    AuthorityScores,
    AuthorityTier,
    Citation,
    CitationSearchResult,
    ExternalCitation,
    SearchStatus,
    VerificationResult,
    VerificationStatus,
)
from .compliance import (
    AlertType,
    ArticleScan,
    ComplianceReport,
    ComplianceViolation,
    ScanSummary,
    Severity,
)
from .domain import CompetitorEntry, DomainCategory, DomainRegistryEntry, SearchTier, TierBatch
from .revision import BannedRemoval, ReplacementOutcome, RollbackOutcome

__all__ = [
    "AlertType",
    "Article",
    "ArticleAnalysis",
    "ArticleScan",
    "AuthorityScores",
    "AuthorityTier",
    "BannedRemoval",
    "Citation",
    "CitationOpportunity",
    "CitationSearchResult",
    "CompetitorEntry",
    "ComplianceReport",
    "ComplianceViolation",
    "DomainCategory",
    "DomainRegistryEntry",
    "ExternalCitation",
    "ReplacementOutcome",
    "RollbackOutcome",
    "ScanSummary",
    "SearchStatus",
    "SearchTier",
    "Severity",
    "TierBatch",
    "VerificationResult",
    "VerificationStatus",
]
