"""Article and article-analysis models."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from .citation import ExternalCitation


class Article(BaseModel):
    """Article fields the citation engine reads."""

    id: uuid.UUID | None = None
    slug: str | None = None
    headline: str = Field(..., min_length=1)
    detailed_content: str = Field(default="")
    language: str = Field(default="en")
    funnel_stage: str | None = Field(default=None, description="TOFU, MOFU or BOFU")
    status: str = Field(default="draft")
    external_citations: list[ExternalCitation] = Field(default_factory=list)


class CitationOpportunity(BaseModel):
    """A sentence in the article body that would benefit from a citation.

    Attributes:
        id: Stable identifier ("s0", "s1", ...)
        text: The sentence itself
        paragraph_context: First 300 characters of the enclosing paragraph
        score: Citation-worthiness score (0-10)
        reasons: Heuristics that fired
        topics: Topic labels (real_estate, legal, financial, location)
    """

    id: str
    text: str
    paragraph: int = 0
    paragraph_context: str = ""
    score: int = Field(..., ge=0, le=10)
    reasons: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ArticleAnalysis(BaseModel):
    """Citation opportunities found in an article body."""

    opportunities: list[CitationOpportunity] = Field(default_factory=list)
    total_sentences: int = 0
    topics: list[str] = Field(default_factory=list)
