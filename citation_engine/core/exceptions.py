"""Exception hierarchy for the citation engine."""

from __future__ import annotations


class CitationEngineError(Exception):
    """Base class for all citation engine errors."""


class CircuitOpenError(CitationEngineError):
    """Circuit breaker is open; the guarded service is not being called."""


class AISearchError(CitationEngineError):
    """AI search collaborator failed after retries."""


class CandidateParseError(CitationEngineError):
    """AI search response contained no parseable JSON array."""


class CitationPolicyError(CitationEngineError):
    """Citation violates the domain policy (competitor or non-approved)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason}: {url}")
        self.url = url
        self.reason = reason


class ReplacementVerificationError(CitationEngineError):
    """Replacement URL failed liveness verification."""

    def __init__(self, url: str, status_code: int | None, error: str | None = None) -> None:
        super().__init__(f"Replacement URL failed verification ({status_code or error}): {url}")
        self.url = url
        self.status_code = status_code
        self.error = error


class ArticleNotFoundError(CitationEngineError):
    """Article does not exist in the article store."""


class RevisionNotRollbackableError(CitationEngineError):
    """Revision is missing, already rolled back, or outside its rollback window."""


class CitationNotFoundError(CitationEngineError):
    """Article does not cite the given URL."""
