"""Outcomes of destructive citation edits."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from .citation import VerificationResult


class ReplacementOutcome(BaseModel):
    """Result of swapping one citation URL for another."""

    article_id: uuid.UUID
    old_url: str
    new_url: str
    revision_id: uuid.UUID
    replaced_count: int = Field(default=0, ge=0, description="Structured citations swapped")
    links_rewritten: bool = False
    verification: VerificationResult


class BannedRemoval(BaseModel):
    """Result of stripping competitor citations from an article."""

    article_id: uuid.UUID
    removed_urls: list[str] = Field(default_factory=list)
    revision_id: uuid.UUID | None = Field(default=None, description="None when nothing was removed")

    @property
    def violation_count(self) -> int:
        return len(self.removed_urls)


class RollbackOutcome(BaseModel):
    article_id: uuid.UUID
    revision_id: uuid.UUID
    revision_type: str
