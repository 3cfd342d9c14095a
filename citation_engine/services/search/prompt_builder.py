"""Prompt text for domain-restricted citation searches."""

from __future__ import annotations

from collections.abc import Sequence

from ...models.article import CitationOpportunity
from ...utils.article_analyzer import format_opportunities_for_prompt
from .category_selector import CategorySelection

SYSTEM_PROMPT = (
    "You are a citation research assistant. You must ONLY cite from the approved domain "
    "list provided. Return ONLY valid JSON arrays with no additional text."
)

_BANNED_PREVIEW = 30
_CONTEXT_CHARS = 500

_LANGUAGE_INSTRUCTIONS = {
    "es": "Proporciona descripciones en español.",
    "en": "Provide descriptions in English.",
}


def banned_domains_prompt(competitor_domains: Sequence[str]) -> str:
    """Prompt block listing domains that must never be cited."""
    listed = "\n".join(f"  - {d}" for d in competitor_domains[:_BANNED_PREVIEW])
    more = len(competitor_domains) - _BANNED_PREVIEW
    if more > 0:
        listed += f"\n  ... and {more} more banned domains"
    return (
        "CITATION POLICY (STRICTLY ENFORCED)\n"
        f"The following {len(competitor_domains)} domains are FORBIDDEN in citations:\n"
        f"{listed}\n"
        "Do not cite, reference or link to any of these domains. "
        "Citations to them are filtered automatically."
    )


def build_search_prompt(
    topic: str,
    domains: Sequence[str],
    language: str = "en",
    article_excerpt: str = "",
    opportunities: Sequence[CitationOpportunity] = (),
    focus: CategorySelection | None = None,
    competitor_domains: Sequence[str] = (),
) -> str:
    """User prompt restricting the search to ``domains``.

    Args:
        topic: Article headline or focus topic
        domains: Domains allowed in this search call
        language: Article language code
        article_excerpt: Article text (first 500 characters are used)
        opportunities: Sentences that need supporting citations
        focus: Preferred source category hint
        competitor_domains: Blacklisted domains to warn about
    """
    language_instruction = _LANGUAGE_INSTRUCTIONS.get(
        language, f"Provide descriptions in the article language ({language})."
    )
    domain_list = "\n".join(f"- {d}" for d in domains)

    sections = [
        "CRITICAL RESTRICTION: You MUST ONLY cite sources from these EXACT domains. "
        "DO NOT use any other websites.",
        f"APPROVED DOMAINS FOR THIS SEARCH:\n{domain_list}",
        f'TASK: Find 5-8 authoritative sources about "{topic}"',
        language_instruction,
    ]
    if focus is not None:
        sections.append(f"PREFERRED SOURCE TYPE: {focus.category.value} ({focus.reasoning})")
    if article_excerpt:
        sections.append(f"Article Context: {article_excerpt[:_CONTEXT_CHARS]}")
    if opportunities:
        sections.append(
            "CLAIMS THAT NEED SUPPORTING SOURCES (reference the id in supportsSentence):\n"
            + format_opportunities_for_prompt(list(opportunities))
        )
    if competitor_domains:
        sections.append(banned_domains_prompt(competitor_domains))
    sections.append(
        "STRICT REQUIREMENTS:\n"
        "1. ONLY USE THE DOMAINS LISTED ABOVE - NO EXCEPTIONS\n"
        "2. Each URL must be a full, existing page URL from one of the approved domains\n"
        "3. Prioritize government, educational and official sources\n"
        "4. Return ONLY a valid JSON array"
    )
    sections.append(
        "RESPONSE FORMAT (JSON array only, no other text):\n"
        "[\n"
        "  {\n"
        '    "url": "full URL from approved domain",\n'
        '    "sourceName": "publisher name",\n'
        '    "description": "what this source covers",\n'
        '    "relevance": "why relevant to topic",\n'
        '    "supportsSentence": "id of the claim it supports, if any",\n'
        '    "suggestedAnchor": "anchor text for the link",\n'
        '    "confidenceScore": 0.0\n'
        "  }\n"
        "]"
    )
    return "\n\n".join(sections)
