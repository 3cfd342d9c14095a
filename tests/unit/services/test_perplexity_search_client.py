"""Tests for PerplexityClient using an httpx mock transport."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from citation_engine.core.circuit_breaker import CircuitBreaker
from citation_engine.core.config import settings
from citation_engine.core.exceptions import AISearchError
from citation_engine.core.retry import RetryPolicy
from citation_engine.services.search.base import AISearchRequest
from citation_engine.services.search.perplexity_client import (
    PerplexityClient,
    is_retryable_search_error,
)

CONTENT = '[{"url": "https://www.boe.es/doc", "sourceName": "BOE"}]'


def _completion(content: str = CONTENT) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class Recorder:
    """Mock transport handler replaying responses in order."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]


def _client(recorder: Recorder, threshold: int = 5, attempts: int = 3) -> PerplexityClient:
    return PerplexityClient(
        api_key="test-key",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recorder)),
        model="sonar-pro",
        retry_policy=RetryPolicy(
            max_attempts=attempts, retryable=is_retryable_search_error, sleep=AsyncMock()
        ),
        circuit_breaker=CircuitBreaker(failure_threshold=threshold, timeout=60.0),
    )


@pytest.fixture
def search_request() -> AISearchRequest:
    return AISearchRequest(
        topic="Property tax changes 2024",
        domain_filter=["boe.es", "agenciatributaria.es"],
        prompt_context="Find sources",
    )


@pytest.mark.unit
class TestPerplexityClient:
    def test_requires_api_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "PERPLEXITY_API_KEY", None)
        with pytest.raises(ValueError, match="API key required"):
            PerplexityClient()

    @pytest.mark.asyncio
    async def test_search_returns_message_content(self, search_request: AISearchRequest):
        """
        Given: The API answers with a chat completion
        When: A domain-restricted search is run
        Then: The raw message text is returned and the domain filter is sent
        """
        recorder = Recorder(httpx.Response(200, json=_completion()))
        client = _client(recorder)

        assert await client.search(search_request) == CONTENT

        (request,) = recorder.requests
        payload = json.loads(request.content)
        assert payload["search_domain_filter"] == ["boe.es", "agenciatributaria.es"]
        assert payload["model"] == "sonar-pro"
        assert payload["messages"][1]["content"] == "Find sources"
        assert request.headers["Authorization"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, search_request: AISearchRequest):
        recorder = Recorder(
            httpx.Response(500, json={"error": "overloaded"}),
            httpx.Response(200, json=_completion("[]")),
        )

        assert await _client(recorder).search(search_request) == "[]"
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, search_request: AISearchRequest):
        recorder = Recorder(httpx.Response(400, json={"error": "bad request"}))

        with pytest.raises(AISearchError):
            await _client(recorder).search(search_request)
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_malformed_completion_raises(self, search_request: AISearchRequest):
        recorder = Recorder(httpx.Response(200, json={"choices": []}))

        with pytest.raises(AISearchError):
            await _client(recorder).search(search_request)

    @pytest.mark.asyncio
    async def test_open_circuit_short_circuits(self, search_request: AISearchRequest):
        recorder = Recorder(httpx.Response(500))
        client = _client(recorder, threshold=1, attempts=1)

        with pytest.raises(AISearchError):
            await client.search(search_request)
        with pytest.raises(AISearchError, match="[Cc]ircuit"):
            await client.search(search_request)
        assert len(recorder.requests) == 1


@pytest.mark.unit
def test_retryable_errors():
    request = httpx.Request("POST", "https://api.perplexity.ai/chat/completions")

    def status_error(code: int) -> httpx.HTTPStatusError:
        return httpx.HTTPStatusError(
            "error", request=request, response=httpx.Response(code, request=request)
        )

    assert is_retryable_search_error(httpx.ConnectError("refused", request=request))
    assert is_retryable_search_error(status_error(429))
    assert is_retryable_search_error(status_error(502))
    assert not is_retryable_search_error(status_error(401))
    assert not is_retryable_search_error(ValueError("bad json"))
