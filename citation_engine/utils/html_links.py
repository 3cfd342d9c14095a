"""Anchor-tag extraction and rewriting for article HTML."""

from __future__ import annotations

import re
from collections.abc import Callable

from pydantic import BaseModel, Field

ANCHOR_PATTERN = re.compile(
    r"""<a\s+(?:[^>]*?\s+)?href=["']([^"']+)["'][^>]*>(.*?)</a>""",
    re.IGNORECASE | re.DOTALL,
)


class LinkRemoval(BaseModel):
    """Result of stripping links from HTML."""

    cleaned_content: str
    removed_urls: list[str] = Field(default_factory=list)

    @property
    def violation_count(self) -> int:
        return len(self.removed_urls)


def extract_links(html: str) -> list[tuple[str, str]]:
    """All ``(href, anchor_text)`` pairs in document order."""
    return [(m.group(1).strip(), m.group(2)) for m in ANCHOR_PATTERN.finditer(html or "")]


def extract_hrefs(html: str) -> list[str]:
    return [href for href, _ in extract_links(html)]


def strip_links(html: str, should_remove: Callable[[str], bool]) -> LinkRemoval:
    """Replace matching ``<a>`` tags by their anchor text.

    Args:
        html: Article HTML
        should_remove: Predicate on the href

    Returns:
        LinkRemoval with the rewritten HTML and the removed hrefs
    """
    removed: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        href = match.group(1).strip()
        if should_remove(href):
            removed.append(href)
            return match.group(2)
        return match.group(0)

    cleaned = ANCHOR_PATTERN.sub(_replace, html or "")
    return LinkRemoval(cleaned_content=cleaned, removed_urls=removed)


def replace_link_url(html: str, old_url: str, new_url: str) -> str:
    """Point every ``<a>`` whose href equals ``old_url`` at ``new_url``."""

    def _replace(match: re.Match[str]) -> str:
        if match.group(1).strip() != old_url:
            return match.group(0)
        start, end = match.span(1)
        offset = match.start(0)
        tag = match.group(0)
        return tag[: start - offset] + new_url + tag[end - offset :]

    return ANCHOR_PATTERN.sub(_replace, html or "")


_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def plain_text(html: str) -> str:
    """Strip tags and collapse whitespace."""
    return _WHITESPACE.sub(" ", _TAG.sub(" ", html or "")).strip()
