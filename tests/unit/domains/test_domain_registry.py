"""Tests for DomainRegistry lookups and search batching."""

from __future__ import annotations

import pytest

from citation_engine.domains.registry import DomainRegistry, get_default_registry
from citation_engine.domains.search_tiers import TierDefinition
from citation_engine.models.domain import (
    CompetitorEntry,
    DomainCategory,
    DomainRegistryEntry,
    SearchTier,
)


def _entries(count: int, tier: SearchTier = SearchTier.S) -> list[DomainRegistryEntry]:
    return [
        DomainRegistryEntry(
            domain=f"site{i}.es",
            category=DomainCategory.GOVERNMENT_OFFICIAL,
            tier=tier,
            trust_score=tier.trust_score,
        )
        for i in range(count)
    ]


@pytest.mark.unit
class TestApprovedDomains:
    def test_exact_and_subdomain_match(self, small_registry: DomainRegistry):
        assert small_registry.is_approved_domain("https://www.boe.es/buscar/doc.php?id=1")
        assert small_registry.is_approved_domain("https://sede.example.gob.es/tramites")
        assert not small_registry.is_approved_domain("https://notboe.es/")

    def test_category_follows_approval(self, small_registry: DomainRegistry):
        for url in ("https://notariado.org/portal", "https://example.com/", "not a url"):
            approved = small_registry.is_approved_domain(url)
            assert approved == (small_registry.get_domain_category(url) is not None)

        assert (
            small_registry.get_domain_category("https://notariado.org/portal")
            == DomainCategory.LEGAL_PROFESSIONAL
        )

    def test_path_scoped_entry(self, small_registry: DomainRegistry):
        """
        Given: "ikea.com/es" is approved but ikea.com as a whole is not
        When: URLs on other paths of the same host are checked
        Then: Only the /es section is approved
        """
        assert small_registry.is_approved_domain("https://www.ikea.com/es/productos")
        assert small_registry.is_approved_domain("https://www.ikea.com/es")
        assert not small_registry.is_approved_domain("https://www.ikea.com/fr/produits")
        assert not small_registry.is_approved_domain("https://www.ikea.com/esp")

    def test_malformed_urls_are_never_approved(self, small_registry: DomainRegistry):
        for url in ("", "boe.es", "::::", "mailto:info@boe.es"):
            assert not small_registry.is_approved_domain(url)

    def test_duplicate_domain_keeps_first_category(self):
        registry = DomainRegistry(
            entries=[
                DomainRegistryEntry(
                    domain="example.org",
                    category=DomainCategory.NEWS_MEDIA,
                    tier=SearchTier.B,
                    trust_score=80,
                ),
                DomainRegistryEntry(
                    domain="www.Example.org",
                    category=DomainCategory.SHOPPING,
                    tier=SearchTier.F,
                    trust_score=40,
                ),
            ],
            competitors=[],
        )
        assert registry.get_all_approved_domains() == ["example.org"]
        assert registry.get_domain_category("https://example.org") == DomainCategory.NEWS_MEDIA


@pytest.mark.unit
class TestCompetitors:
    def test_competitor_detected_on_any_subdomain(self, small_registry: DomainRegistry):
        assert small_registry.is_competitor("https://www.idealista.com/venta-viviendas/")
        assert small_registry.is_competitor("https://blog.idealista.com/news")
        assert not small_registry.is_competitor("https://www.boe.es/")

    def test_substring_match_is_bidirectional(self, small_registry: DomainRegistry):
        # A hostname contained in a competitor domain also matches
        assert small_registry.is_competitor("https://dealista.com/")

    def test_competitor_reason(self, small_registry: DomainRegistry):
        assert small_registry.competitor_reason("https://kyero.com/es") == (
            "International property portal (competitor)"
        )
        assert small_registry.competitor_reason("https://idealista.com") == "Real estate competitor"
        assert small_registry.competitor_reason("https://boe.es") is None

    def test_unparseable_input_compared_as_raw_string(self, small_registry: DomainRegistry):
        assert small_registry.is_competitor("IDEALISTA.COM")
        assert not small_registry.is_competitor("not a url")

    def test_overlap_between_lists_is_reported(self):
        registry = DomainRegistry(
            entries=_entries(1) + [
                DomainRegistryEntry(
                    domain="thinkspain.com",
                    category=DomainCategory.NEWS_MEDIA,
                    tier=SearchTier.B,
                    trust_score=80,
                )
            ],
            competitors=[CompetitorEntry(domain="thinkspain.com")],
        )
        assert registry.overlapping_domains == frozenset({"thinkspain.com"})


@pytest.mark.unit
class TestGovernmentDetection:
    def test_host_patterns(self, small_registry: DomainRegistry):
        assert small_registry.is_government_url("https://www.gov.uk/tax")
        assert small_registry.is_government_url("https://sede.catastro.gob.es/")
        assert small_registry.is_government_url("https://ec.europa.eu/taxation")
        assert not small_registry.is_government_url("https://www.surinenglish.com/")

    def test_registry_category_counts_as_government(self, small_registry: DomainRegistry):
        assert small_registry.is_government_url("https://agenciatributaria.es/AEAT")

    def test_pattern_must_align_with_labels(self):
        registry = get_default_registry()
        assert not registry.is_government_url("https://www.educasol.org/")
        assert not registry.is_government_url("not a url")


@pytest.mark.unit
class TestSearchBatches:
    def test_batches_follow_tier_order(self, small_registry: DomainRegistry):
        batches = small_registry.all_domains()

        assert [b.tier for b in batches] == [SearchTier.S, SearchTier.A, SearchTier.B]
        assert batches[0].domains == ("boe.es", "agenciatributaria.es", "example.gob.es")
        assert batches[2].domains == ("surinenglish.com", "theolivepress.es", "ikea.com")
        assert batches[0].name == "Tier S (Gov/Official)"

    def test_large_tier_split_into_batches_of_twenty(self):
        registry = DomainRegistry(entries=_entries(25), competitors=[])
        batches = registry.all_domains()

        assert [len(b.domains) for b in batches] == [20, 5]
        assert batches[1].batch_index == 1
        assert batches[1].name.endswith("#2")

    def test_batch_size_above_api_limit_rejected(self):
        with pytest.raises(ValueError):
            DomainRegistry(entries=_entries(1), competitors=[], max_batch_size=21)

    def test_domain_summary(self, small_registry: DomainRegistry):
        summary = small_registry.domain_summary()
        assert summary["total"] == 8
        assert summary["government_official"] == 3
        assert summary["news_media"] == 2


@pytest.mark.unit
class TestStaticConfiguration:
    def test_tier_listing_unapproved_domain_is_rejected(self):
        with pytest.raises(ValueError, match="not an approved domain"):
            DomainRegistry.from_static(
                approved={DomainCategory.NEWS_MEDIA: ("news.example",)},
                competitors=(),
                tiers=(
                    TierDefinition(tier=SearchTier.S, label="Tier S", domains=("other.example",)),
                ),
            )

    def test_untiered_domain_falls_back_to_category_tier(self):
        registry = DomainRegistry.from_static(
            approved={DomainCategory.NEWS_MEDIA: ("news.example", "tiered.example")},
            competitors=(),
            tiers=(TierDefinition(tier=SearchTier.S, label="Tier S", domains=("tiered.example",)),),
            category_tiers={DomainCategory.NEWS_MEDIA: SearchTier.B},
        )
        tiers = {entry.domain: entry.tier for entry in registry.entries}
        assert tiers == {"tiered.example": SearchTier.S, "news.example": SearchTier.B}

    def test_default_registry_is_consistent(self):
        registry = get_default_registry()
        batches = registry.all_domains()

        assert batches
        assert all(1 <= len(b.domains) <= 20 for b in batches)
        priorities = [b.tier.priority for b in batches]
        assert priorities == sorted(priorities)
        assert "thinkspain.com" in registry.overlapping_domains
        assert registry.is_approved_domain("https://www.boe.es/")
        assert registry.is_competitor("https://www.idealista.com/")
