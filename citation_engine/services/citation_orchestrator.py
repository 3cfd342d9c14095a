"""Cascading batch citation search.

Searches the registry tier by tier (at most 20 domains per AI search call)
until the target citation count is met or the tiers run out. Every
candidate passes the same pipeline: approved domain, not a competitor,
deduplicated by normalized URL, authority scored, matched to the claim it
supports. The final set is ranked, truncated, verified concurrently and
re-ranked by verification status.

Example:
    >>> orchestrator = CitationOrchestrator(registry, search_client, verifier)
    >>> result = await orchestrator.find_citations(article)
    >>> result.status, len(result.citations)
    (<SearchStatus.SUCCESS: 'success'>, 6)
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable, Sequence

import structlog

from ..core.config import FunnelTargets, settings
from ..core.exceptions import CandidateParseError
from ..domains.registry import DomainRegistry
from ..models.article import Article, CitationOpportunity
from ..models.citation import (
    Citation,
    CitationSearchResult,
    SearchStatus,
    VerificationResult,
    VerificationStatus,
)
from ..models.domain import TierBatch
from ..scoring.authority_scorer import AuthorityScorer
from ..utils.article_analyzer import analyze_article
from ..utils.html_links import plain_text
from ..utils.response_parser import ParsedCitationCandidate, ParseFailure, parse_candidates
from ..utils.url_utils import extract_domain, normalize_url
from .domain_rotation import (
    DomainRotationTracker,
    filter_and_prioritize,
    rotation_sort_key,
    underutilized_rank,
)
from .search.base import AISearchClient, AISearchRequest
from .search.category_selector import CategorySelection, select_focus_category
from .search.prompt_builder import build_search_prompt
from .verification.url_verifier import UrlVerifier

logger = structlog.get_logger(__name__)

_WORD = re.compile(r"[a-záéíóúñü0-9]{4,}")
_MIN_KEYWORD_OVERLAP = 2


def _keywords(text: str) -> set[str]:
    return set(_WORD.findall((text or "").lower()))


def match_opportunity(
    candidate: ParsedCitationCandidate, opportunities: Sequence[CitationOpportunity]
) -> tuple[CitationOpportunity | None, float | None]:
    """Claim a candidate supports, with a match confidence.

    An explicit ``supportsSentence`` (id or sentence text) wins; otherwise
    the sentence sharing the most keywords with the candidate is used.
    """
    if not opportunities:
        return None, None

    hint = (candidate.supports_sentence or "").strip()
    if hint:
        for opportunity in opportunities:
            if hint == opportunity.id or hint.lower() == opportunity.text.lower():
                return opportunity, candidate.confidence_score or 0.9

    words = _keywords(f"{candidate.description} {candidate.relevance}")
    best: CitationOpportunity | None = None
    best_overlap = 0
    for opportunity in opportunities:
        overlap = len(words & _keywords(opportunity.text))
        if overlap > best_overlap:
            best, best_overlap = opportunity, overlap

    if best is None or best_overlap < _MIN_KEYWORD_OVERLAP:
        return None, None
    confidence = best_overlap / max(len(_keywords(best.text)), 1)
    return best, round(min(1.0, confidence), 2)


def merge_duplicates(existing: Citation, incoming: Citation) -> Citation:
    """Merge two citations with the same normalized URL.

    The higher-scored entry is kept; the other's description is appended
    when it adds information, and missing claim links are filled in.
    """
    base, other = (incoming, existing) if incoming.authority_score > existing.authority_score else (existing, incoming)
    update: dict = {}
    if other.description and other.description not in base.description:
        update["description"] = f"{base.description} {other.description}".strip()
    for field in ("target_sentence_id", "target_sentence", "suggested_anchor", "confidence_score"):
        if getattr(base, field) is None and getattr(other, field) is not None:
            update[field] = getattr(other, field)
    return base.model_copy(update=update) if update else base


class CitationOrchestrator:
    """Cascading batch search over the domain registry."""

    def __init__(
        self,
        registry: DomainRegistry,
        search_client: AISearchClient,
        verifier: UrlVerifier,
        scorer: AuthorityScorer | None = None,
        rotation: DomainRotationTracker | None = None,
        funnel_targets: FunnelTargets | None = None,
        tier_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize orchestrator.

        Args:
            registry: Domain policy and tier batches
            search_client: AI search collaborator
            verifier: URL liveness verifier
            scorer: Authority scorer
            rotation: Usage tracker biasing searches toward underused domains
            funnel_targets: Target citation count per funnel stage
            tier_delay: Pause between tier searches (seconds)
            sleep: Awaitable sleep (replaced in tests)
        """
        self.registry = registry
        self.search_client = search_client
        self.verifier = verifier
        self.scorer = scorer or AuthorityScorer()
        self.rotation = rotation
        self.funnel_targets = funnel_targets or settings.funnel_targets
        self.tier_delay = settings.SEARCH_TIER_DELAY_SECONDS if tier_delay is None else tier_delay
        self._sleep = sleep

    async def find_citations(
        self,
        article: Article,
        target_count: int | None = None,
        use_context: bool = True,
    ) -> CitationSearchResult:
        """Find up to ``target_count`` policy-compliant, verified citations.

        Args:
            article: Article to cite
            target_count: Override the funnel-stage target
            use_context: Match citations to citation-worthy sentences

        Returns:
            CitationSearchResult with status success (target met), partial or failed.
            Search and parse failures never raise.
        """
        target = target_count or self.funnel_targets.for_stage(article.funnel_stage)
        opportunities = (
            analyze_article(article.detailed_content).opportunities if use_context else []
        )
        focus = select_focus_category(article.headline, article.funnel_stage)
        used_in_article, underutilized = await self._rotation_inputs(article)
        rank = underutilized_rank(underutilized)

        logger.info(
            "citation_search_started",
            article_id=str(article.id) if article.id else None,
            headline=article.headline[:100],
            funnel_stage=article.funnel_stage,
            target=target,
            opportunities=len(opportunities),
            focus=focus.category.value,
        )

        accumulated: dict[str, Citation] = {}
        tiers_searched: list[str] = []
        failed_calls = 0

        for batch in self.registry.all_domains():
            if len(accumulated) >= target:
                logger.info("citation_target_reached", found=len(accumulated), target=target)
                break
            searchable = [d for d in batch.domains if d not in self.registry.overlapping_domains]
            if not searchable:
                continue
            if tiers_searched and self.tier_delay > 0:
                await self._sleep(self.tier_delay)

            domains = filter_and_prioritize(searchable, used_in_article, underutilized)
            if not domains:
                domains = searchable
            tiers_searched.append(batch.name)

            candidates = await self._search_batch(article, batch, domains, opportunities, focus)
            if candidates is None:
                failed_calls += 1
                continue

            accepted = 0
            for candidate in candidates:
                if self._accept(candidate, batch, article, opportunities, accumulated):
                    accepted += 1
            logger.info(
                "tier_search_complete",
                tier=batch.name,
                candidates=len(candidates),
                accepted=accepted,
                total=len(accumulated),
                target=target,
            )

        if not accumulated:
            reason = (
                "AI search failed for every tier"
                if tiers_searched and failed_calls == len(tiers_searched)
                else f"No policy-compliant citations found across {len(tiers_searched)} search batches"
            )
            logger.warning("citation_search_failed", reason=reason, tiers=len(tiers_searched))
            return CitationSearchResult(
                citations=[],
                status=SearchStatus.FAILED,
                target_count=target,
                tiers_searched=tiers_searched,
                reason=reason,
            )

        domain_key = rotation_sort_key(rank)
        ranked = sorted(
            accumulated.values(),
            key=lambda c: (-c.authority_score, domain_key(self._registry_domain(c.url))),
        )[:target]

        verifications = await self.verifier.verify_many([c.url for c in ranked])
        verified = [self._apply_verification(c, v) for c, v in zip(ranked, verifications)]
        final = sorted(
            verified,
            key=lambda c: (
                c.verification_status.sort_rank,
                -c.authority_score,
                domain_key(self._registry_domain(c.url)),
            ),
        )

        verified_count = sum(1 for c in final if c.verification_status == VerificationStatus.VERIFIED)
        status = SearchStatus.SUCCESS if len(final) >= target else SearchStatus.PARTIAL
        logger.info(
            "citation_search_complete",
            status=status.value,
            returned=len(final),
            total_found=len(accumulated),
            verified=verified_count,
            tiers=len(tiers_searched),
        )
        return CitationSearchResult(
            citations=final,
            status=status,
            total_found=len(accumulated),
            verified_count=verified_count,
            target_count=target,
            tiers_searched=tiers_searched,
            reason=None if status == SearchStatus.SUCCESS else f"Found {len(final)} of {target} citations",
        )

    async def _rotation_inputs(self, article: Article) -> tuple[set[str], list[str]]:
        """(domains used by the article, underutilized domains); empty on error."""
        if self.rotation is None:
            return set(), []
        try:
            used = await self.rotation.get_article_used_domains(article.id) if article.id else set()
            underutilized = await self.rotation.get_underutilized_domains()
        except Exception as e:
            logger.warning("rotation_unavailable", error=str(e))
            return set(), []
        return used, underutilized

    async def _search_batch(
        self,
        article: Article,
        batch: TierBatch,
        domains: list[str],
        opportunities: Sequence[CitationOpportunity],
        focus: CategorySelection,
    ) -> list[ParsedCitationCandidate] | None:
        """Run one AI search; None if the call failed, [] if nothing parseable came back."""
        prompt = build_search_prompt(
            topic=article.headline,
            domains=domains,
            language=article.language,
            article_excerpt=plain_text(article.detailed_content),
            opportunities=opportunities,
            focus=focus,
            competitor_domains=self.registry.competitor_domains(),
        )
        request = AISearchRequest(
            topic=article.headline,
            language_hint=article.language,
            domain_filter=domains,
            prompt_context=prompt,
        )

        try:
            text = await self.search_client.search(request)
        except Exception as e:
            logger.warning(
                "tier_search_failed",
                tier=batch.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        try:
            entries = parse_candidates(text)
        except CandidateParseError as e:
            logger.warning("tier_response_unparseable", tier=batch.name, error=str(e))
            return []

        candidates = []
        for entry in entries:
            if isinstance(entry, ParseFailure):
                logger.info(
                    "candidate_discarded", tier=batch.name, index=entry.index, reason=entry.reason
                )
            else:
                candidates.append(entry)
        return candidates

    def _accept(
        self,
        candidate: ParsedCitationCandidate,
        batch: TierBatch,
        article: Article,
        opportunities: Sequence[CitationOpportunity],
        accumulated: dict[str, Citation],
    ) -> bool:
        """Run the filter pipeline; returns True if a new citation was added."""
        url = candidate.url
        if not self.registry.is_approved_domain(url):
            logger.info("candidate_rejected", tier=batch.name, url=url, reason="not_approved")
            return False
        if self.registry.is_competitor(url):
            logger.info("candidate_rejected", tier=batch.name, url=url, reason="competitor")
            return False

        scores = self.scorer.score(
            url, candidate.source_name, candidate.description, is_accessible=True
        )
        opportunity, confidence = match_opportunity(candidate, opportunities)
        category = self.registry.get_domain_category(url)
        citation = Citation(
            url=url,
            source_name=candidate.source_name or extract_domain(url),
            description=candidate.description,
            relevance=candidate.relevance,
            authority_score=scores.total,
            authority_tier=scores.tier,
            language=candidate.language or article.language,
            domain=extract_domain(url),
            category=category.value if category else None,
            target_sentence_id=opportunity.id if opportunity else None,
            target_sentence=opportunity.text if opportunity else None,
            suggested_anchor=candidate.suggested_anchor or (candidate.source_name or None),
            confidence_score=confidence if opportunity else candidate.confidence_score,
            batch_tier=batch.name,
        )

        key = normalize_url(url)
        existing = accumulated.get(key)
        if existing is not None:
            accumulated[key] = merge_duplicates(existing, citation)
            logger.info("candidate_merged", tier=batch.name, url=url)
            return False

        accumulated[key] = citation
        return True

    def _apply_verification(self, citation: Citation, result: VerificationResult) -> Citation:
        """Rescore accessibility from the verification outcome."""
        rescored = self.scorer.apply(citation, is_accessible=result.verified)
        return rescored.model_copy(
            update={
                "verification_status": result.verification_status,
                "status_code": result.status_code,
            }
        )

    def _registry_domain(self, url: str) -> str:
        entry = self.registry.match(url)
        return entry.host if entry else extract_domain(url)
