"""API request/response schemas for citation engine endpoints."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models.article import Article

# ============================================================================
# Citation Endpoint Schemas
# ============================================================================


class FindCitationsRequest(BaseModel):
    """Request model for /v1/citations/find.

    Exactly one of ``article_id`` (stored article) or ``article`` (inline)
    must be given.

    Attributes:
        article_id: Stored article to cite
        article: Inline article to cite
        target_count: Override the funnel-stage target (1-20)
        use_context: Match citations to citation-worthy sentences
        attach: Save the found citations on the stored article
    """

    article_id: uuid.UUID | None = None
    article: Article | None = None
    target_count: int | None = Field(None, ge=1, le=20)
    use_context: bool = True
    attach: bool = Field(False, description="Attach results to the stored article")

    @model_validator(mode="after")
    def _one_article_source(self) -> FindCitationsRequest:
        if (self.article_id is None) == (self.article is None):
            raise ValueError("Provide exactly one of article_id or article")
        if self.attach and self.article_id is None:
            raise ValueError("attach requires article_id")
        return self


class ReplaceCitationRequest(BaseModel):
    """Request model for /v1/citations/replace."""

    article_id: uuid.UUID
    old_url: str = Field(..., min_length=1)
    new_url: str = Field(..., min_length=1)
    source_name: str | None = None
    description: str | None = None
    confidence: float | None = Field(None, ge=0.0, le=1.0)

    @field_validator("new_url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        v = v.strip()
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("new_url must be an http(s) URL")
        return v


class RemoveBannedRequest(BaseModel):
    article_id: uuid.UUID


# ============================================================================
# Domain Endpoint Schemas
# ============================================================================


class DomainCheckResponse(BaseModel):
    """Policy classification of a single URL."""

    url: str
    domain: str
    approved: bool
    competitor: bool
    competitor_reason: str | None = None
    category: str | None = None
    tier: str | None = None
    government: bool = False


class DomainSyncResponse(BaseModel):
    approved_domains: int
    competitor_domains: int
