"""Tests for Settings and funnel targets."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from citation_engine.core.config import FunnelTargets, Settings


@pytest.mark.unit
class TestFunnelTargets:
    def test_default_targets_per_stage(self):
        targets = Settings().funnel_targets

        assert targets.for_stage("TOFU") == 3
        assert targets.for_stage("MOFU") == 5
        assert targets.for_stage("BOFU") == 6
        assert targets.for_stage(None) == 8

    def test_stage_lookup_is_case_insensitive(self):
        targets = FunnelTargets(tofu=1, mofu=2, bofu=3, default=4)
        assert targets.for_stage(" bofu ") == 3
        assert targets.for_stage("unknown") == 4


@pytest.mark.unit
class TestSettingsValidation:
    def test_batch_size_cannot_exceed_api_limit(self):
        with pytest.raises(ValidationError):
            Settings(SEARCH_MAX_DOMAINS_PER_BATCH=21)

    def test_search_timeout_bounded(self):
        with pytest.raises(ValidationError):
            Settings(PERPLEXITY_TIMEOUT=30.0)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CITATION_TARGET_BOFU", "9")
        assert Settings().funnel_targets.bofu == 9
