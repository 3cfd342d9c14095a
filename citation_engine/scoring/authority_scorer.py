"""Authority scoring for citations (0-100).

Four components are summed and capped at 100:

- Domain class (0-40): government and official sources outrank legal,
  news and commercial sites regardless of topical relevance
- Content quality (0-30): keyword heuristics on source name and description
- Accessibility (0-20): whether the URL responded during verification
- Relevance (0-10): regional keywords in the description

Scoring is deterministic: identical input always yields identical scores.
"""

from __future__ import annotations

import re

from ..models.citation import AuthorityScores, AuthorityTier, Citation
from ..utils.url_utils import extract_host

# (pattern on hostname, score), first match wins
_DOMAIN_CLASSES: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\.(gov|gob|edu|ac)\."), 40),
    (
        re.compile(
            r"boe\.es|agenciatributaria|registradores\.org|notariado\.org"
            r"|juntadeandalucia\.es|seg-social\.es|mpr\.gob\.es"
        ),
        40,
    ),
    (re.compile(r"europa\.eu|oecd\.org|worldbank\.org|imf\.org|un\.org|ecb\.europa\.eu"), 38),
    (re.compile(r"gov\.uk|irs\.gov|hmrc\.gov\.uk|belastingdienst\.nl"), 37),
    (re.compile(r"bbc\.com|reuters|bloomberg|guardian|elpais\.com|elmundo\.es|ft\.com"), 28),
    (re.compile(r"notaries|notariado|registradores|lawyer|legal|abogado|solicitor|attorney"), 26),
)
_ORG_TLD = re.compile(r"\.org$")
_COMMERCIAL = re.compile(r"\.(com|net)")
_TOURISM_BOARD = re.compile(r"turismo|tourism|travel|visit")
_ES_TLD = re.compile(r"\.es$")
_NET_TLD = re.compile(r"\.net$")
_GENERIC_DOMAIN_SCORE = 12

# (pattern on source name, bonus), first match wins
_SOURCE_NAME_SIGNALS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"official|ministry|government|department|agency|authority"), 15),
    (re.compile(r"lawyer|legal|notary|registrar|professional|attorney"), 12),
    (re.compile(r"association|institute|council|chamber|federation"), 10),
    (re.compile(r"news|times|post|journal|magazine"), 8),
)
_ACTIONABLE = re.compile(r"guide|step-by-step|how to|requirements|process|official")
_MARKETING = re.compile(r"buy now|contact us|our services|best deals|exclusive")

# (pattern on description, score), first match wins; base 5
_RELEVANCE: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"costa del sol|málaga|malaga|marbella|estepona|mijas|fuengirola|torremolinos"), 10),
    (re.compile(r"andalusia|andalucía|andalucia"), 9),
    (re.compile(r"spain|spanish|españa|español"), 8),
    (re.compile(r"europe|european|\beu\b"), 6),
)
_BASE_RELEVANCE = 5

HIGH_TIER_THRESHOLD = 70
MEDIUM_TIER_THRESHOLD = 40


def domain_class_score(url: str) -> int:
    """Domain-class weight (12-40) for a URL."""
    domain = extract_host(url) or (url or "").lower()
    for pattern, score in _DOMAIN_CLASSES:
        if pattern.search(domain):
            return score
    if _ORG_TLD.search(domain) and not _COMMERCIAL.search(domain):
        return 24
    if _TOURISM_BOARD.search(domain) and _ES_TLD.search(domain):
        return 23
    if _NET_TLD.search(domain):
        return 20
    return _GENERIC_DOMAIN_SCORE


def content_quality_score(source_name: str, description: str) -> int:
    """Content-quality heuristics, clamped to 0-30."""
    source_lower = (source_name or "").lower()
    description = description or ""
    description_lower = description.lower()

    score = 0
    for pattern, bonus in _SOURCE_NAME_SIGNALS:
        if pattern.search(source_lower):
            score += bonus
            break

    if len(description) > 150:
        score += 5
    elif len(description) > 80:
        score += 3

    if _ACTIONABLE.search(description_lower):
        score += 5
    if _MARKETING.search(description_lower):
        score -= 10

    return min(30, max(0, score))


def relevance_score(description: str) -> int:
    description_lower = (description or "").lower()
    for pattern, score in _RELEVANCE:
        if pattern.search(description_lower):
            return score
    return _BASE_RELEVANCE


def tier_for(total: int) -> AuthorityTier:
    if total >= HIGH_TIER_THRESHOLD:
        return AuthorityTier.HIGH
    if total >= MEDIUM_TIER_THRESHOLD:
        return AuthorityTier.MEDIUM
    return AuthorityTier.LOW


def calculate_authority_score(
    url: str,
    source_name: str = "",
    description: str = "",
    is_accessible: bool = False,
) -> AuthorityScores:
    """Score a citation.

    Args:
        url: Citation URL
        source_name: Publisher / source name
        description: What the source covers
        is_accessible: Whether the URL responded during verification

    Returns:
        AuthorityScores with the component breakdown, total and tier
    """
    domain = domain_class_score(url)
    content = content_quality_score(source_name, description)
    accessibility = 20 if is_accessible else 0
    relevance = relevance_score(description)
    total = min(100, domain + content + accessibility + relevance)

    return AuthorityScores(
        domain_score=domain,
        content_score=content,
        accessibility_score=accessibility,
        relevance_score=relevance,
        total=total,
        tier=tier_for(total),
    )


class AuthorityScorer:
    """Applies :func:`calculate_authority_score` to citations."""

    def score(
        self,
        url: str,
        source_name: str = "",
        description: str = "",
        is_accessible: bool = False,
    ) -> AuthorityScores:
        return calculate_authority_score(url, source_name, description, is_accessible)

    def apply(self, citation: Citation, is_accessible: bool) -> Citation:
        """Return a copy of ``citation`` carrying fresh authority scores."""
        scores = self.score(
            citation.url, citation.source_name, citation.description, is_accessible
        )
        return citation.model_copy(
            update={"authority_score": scores.total, "authority_tier": scores.tier}
        )
