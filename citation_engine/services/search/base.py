"""AI search collaborator interface."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field


class AISearchRequest(BaseModel):
    """One domain-restricted search call.

    Attributes:
        topic: Article topic / headline
        language_hint: Language the descriptions should be written in
        domain_filter: Domains the search is restricted to (API limit: 20)
        prompt_context: Full user prompt built by the prompt builder
    """

    topic: str = Field(..., min_length=1)
    language_hint: str = Field(default="en")
    domain_filter: list[str] = Field(..., min_length=1, max_length=20)
    prompt_context: str = Field(default="")


class AISearchClient(Protocol):
    """Anything that can run an AI search and return raw response text."""

    async def search(self, request: AISearchRequest) -> str: ...
