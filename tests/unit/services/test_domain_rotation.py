"""Tests for domain rotation ordering and the usage ledger tracker."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from citation_engine.domains.registry import DomainRegistry
from citation_engine.services.domain_rotation import (
    DomainRotationTracker,
    filter_and_prioritize,
    rotation_sort_key,
    underutilized_rank,
)

REGISTRY_ORDER = [
    "boe.es",
    "agenciatributaria.es",
    "example.gob.es",
    "notariado.org",
    "registradores.org",
    "surinenglish.com",
    "theolivepress.es",
    "ikea.com",
]


@pytest.mark.unit
class TestOrdering:
    def test_filter_drops_used_and_prefers_underutilized(self):
        result = filter_and_prioritize(["a.es", "b.es", "c.es", "d.es"], {"b.es"}, ["d.es", "c.es"])
        assert result == ["d.es", "c.es", "a.es"]

    def test_unranked_domains_keep_original_order(self):
        key = rotation_sort_key(underutilized_rank(["z.es"]))
        assert sorted(["c.es", "a.es", "z.es", "b.es"], key=key) == ["z.es", "c.es", "a.es", "b.es"]

    def test_no_rotation_data_is_identity(self):
        assert filter_and_prioritize(["a.es", "b.es"], set(), []) == ["a.es", "b.es"]


@pytest.mark.unit
class TestDomainRotationTracker:
    @pytest.mark.asyncio
    async def test_empty_ledger_returns_registry_order(
        self, async_db_session, small_registry: DomainRegistry
    ):
        tracker = DomainRotationTracker(async_db_session, small_registry)

        assert await tracker.get_underutilized_domains() == REGISTRY_ORDER
        assert await tracker.get_underutilized_domains(limit=2) == REGISTRY_ORDER[:2]

    @pytest.mark.asyncio
    async def test_never_used_first_then_least_used(
        self, async_db_session, small_registry: DomainRegistry, make_article
    ):
        """
        Given: boe.es cited twice and notariado.org once
        When: Underutilized domains are listed
        Then: Never-used domains come first, then notariado.org, then boe.es
        """
        first = await make_article()
        second = await make_article()
        tracker = DomainRotationTracker(async_db_session, small_registry)

        assert await tracker.record_usage(first.id, "https://www.boe.es/a", "BOE")
        assert await tracker.record_usage(second.id, "https://boe.es/b")
        assert await tracker.record_usage(first.id, "https://www.notariado.org/portal")

        domains = await tracker.get_underutilized_domains()

        assert domains[-2:] == ["notariado.org", "boe.es"]
        assert domains[:-2] == [d for d in REGISTRY_ORDER if d not in ("boe.es", "notariado.org")]

    @pytest.mark.asyncio
    async def test_ledger_uses_registry_domain(
        self, async_db_session, small_registry: DomainRegistry, make_article
    ):
        article = await make_article()
        tracker = DomainRotationTracker(async_db_session, small_registry)

        await tracker.record_usage(article.id, "https://sede.example.gob.es/tramite")
        await tracker.record_usage(article.id, "https://unlisted.example.com/page")

        assert await tracker.get_article_used_domains(article.id) == {
            "example.gob.es",
            "unlisted.example.com",
        }

    @pytest.mark.asyncio
    async def test_deactivated_citation_no_longer_counts_for_article(
        self, async_db_session, small_registry: DomainRegistry, make_article
    ):
        article = await make_article()
        tracker = DomainRotationTracker(async_db_session, small_registry)
        await tracker.record_usage(article.id, "https://www.boe.es/a")

        assert await tracker.deactivate(article.id, "https://www.boe.es/a")

        assert await tracker.get_article_used_domains(article.id) == set()
        # Historical use still counts globally
        assert (await tracker.get_underutilized_domains())[-1] == "boe.es"

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, small_registry: DomainRegistry):
        db = AsyncMock()
        db.add = MagicMock()
        db.flush.side_effect = RuntimeError("database unavailable")
        tracker = DomainRotationTracker(db, small_registry)

        assert await tracker.record_usage(uuid.uuid4(), "https://www.boe.es/a") is False
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
