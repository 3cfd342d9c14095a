"""Find citation-worthy sentences in an article body.

Sentences are scored 0-10 on statistics, authoritative or regulatory
language, comparative claims and monetary figures. Sentences at or above
the threshold become citation opportunities passed to the search prompt.
"""

from __future__ import annotations

import re

from ..core.config import settings
from ..models.article import ArticleAnalysis, CitationOpportunity

_TAG = re.compile(r"<[^>]*>")
_PARAGRAPH_BREAK = re.compile(r"\n\n+")
_SENTENCE_END = re.compile(r"[.!?]+")
_MIN_LENGTH = 20
_CONTEXT_CHARS = 300

# (reason, pattern, points); patterns marked case-sensitive run on the raw sentence
_SIGNALS: tuple[tuple[str, re.Pattern[str], int, bool], ...] = (
    ("percentage", re.compile(r"\d+%|\d+\s*(percent|per cent)"), 3, True),
    ("year_or_duration", re.compile(r"\d{4}|\d+\s*years?"), 2, True),
    ("statistics", re.compile(r"statistics|data|study|research|report|survey"), 3, False),
    (
        "attribution",
        re.compile(r"according to|based on|studies show|experts|research indicates"),
        2,
        False,
    ),
    ("official", re.compile(r"government|official|law|regulation|ministry|department"), 3, False),
    ("comparative", re.compile(r"best|worst|highest|lowest|most|least|top|bottom"), 2, False),
    ("trend", re.compile(r"increased|decreased|grew|declined|rose|fell|dropped"), 2, False),
    (
        "regulatory",
        re.compile(r"must|required|mandatory|legal|illegal|prohibited|permitted|allowed"),
        2,
        False,
    ),
    ("monetary", re.compile(r"€|£|\$|price|cost|fee|tax|budget|income|salary"), 2, False),
)

_TOPICS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("real_estate", re.compile(r"property|real estate|housing|apartment|villa|home")),
    ("legal", re.compile(r"law|legal|regulation|permit|license|document")),
    ("financial", re.compile(r"price|cost|tax|mortgage|investment|finance")),
    ("location", re.compile(r"spain|spanish|andalusia|costa del sol|malaga|marbella")),
)


def score_sentence(sentence: str) -> tuple[int, list[str]]:
    """Citation-worthiness score (capped at 10) and the signals that fired."""
    lower = sentence.lower()
    score = 0
    reasons = []
    for reason, pattern, points, case_sensitive in _SIGNALS:
        if pattern.search(sentence if case_sensitive else lower):
            score += points
            reasons.append(reason)
    return min(score, 10), reasons


def extract_topics(text: str) -> list[str]:
    lower = text.lower()
    return [topic for topic, pattern in _TOPICS if pattern.search(lower)]


def analyze_article(
    content: str,
    max_opportunities: int | None = None,
    min_score: int | None = None,
) -> ArticleAnalysis:
    """Parse article HTML/text into ranked citation opportunities.

    Args:
        content: Article body (HTML allowed)
        max_opportunities: Keep at most this many (defaults to settings)
        min_score: Minimum score to count as an opportunity (defaults to settings)

    Returns:
        ArticleAnalysis with opportunities sorted by score, highest first
    """
    limit = max_opportunities if max_opportunities is not None else settings.CITATION_MAX_OPPORTUNITIES
    threshold = min_score if min_score is not None else settings.CITATION_MIN_SENTENCE_SCORE

    text = _TAG.sub(" ", content or "")
    paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if len(p.strip()) > _MIN_LENGTH]

    scored: list[CitationOpportunity] = []
    topics: list[str] = []
    index = 0
    for paragraph_index, paragraph in enumerate(paragraphs):
        for raw in _SENTENCE_END.split(paragraph):
            sentence = raw.strip()
            if len(sentence) <= _MIN_LENGTH:
                continue
            score, reasons = score_sentence(sentence)
            sentence_topics = extract_topics(sentence)
            topics.extend(t for t in sentence_topics if t not in topics)
            scored.append(
                CitationOpportunity(
                    id=f"s{index}",
                    text=sentence,
                    paragraph=paragraph_index,
                    paragraph_context=paragraph[:_CONTEXT_CHARS],
                    score=score,
                    reasons=reasons,
                    topics=sentence_topics,
                )
            )
            index += 1

    opportunities = sorted(
        (s for s in scored if s.score >= threshold), key=lambda s: s.score, reverse=True
    )
    return ArticleAnalysis(
        opportunities=opportunities[:limit],
        total_sentences=len(scored),
        topics=topics,
    )


def format_opportunities_for_prompt(opportunities: list[CitationOpportunity]) -> str:
    """Numbered list of sentences for the search prompt."""
    return "\n".join(
        f'{i}. [{o.id}] "{o.text}" (Score: {o.score}/10)' for i, o in enumerate(opportunities, 1)
    )
