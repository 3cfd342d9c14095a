"""Perplexity AI search client.

Runs one domain-restricted chat completion per call and returns the raw
assistant text. Parsing the (untrusted) text is left to the caller.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...core.circuit_breaker import CircuitBreaker
from ...core.config import settings
from ...core.exceptions import AISearchError, CircuitOpenError
from ...core.retry import ExponentialBackoff, RetryPolicy
from .base import AISearchRequest
from .prompt_builder import SYSTEM_PROMPT

logger = structlog.get_logger(__name__)


def is_retryable_search_error(exc: BaseException) -> bool:
    """Network errors, rate limiting and 5xx are retried; other 4xx are not."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class PerplexityClient:
    """Client for the Perplexity chat completions API.

    Example:
        >>> client = PerplexityClient(api_key="your-key")
        >>> text = await client.search(
        ...     AISearchRequest(topic="Property tax", domain_filter=["boe.es"], prompt_context=prompt)
        ... )
    """

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        model: str | None = None,
        retry_policy: RetryPolicy | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        temperature: float = 0.2,
        max_tokens: int = 2000,
    ):
        """Initialize Perplexity client.

        Args:
            api_key: Perplexity API key (defaults to settings.PERPLEXITY_API_KEY)
            http_client: Optional custom HTTP client for testing
            model: Model to use (defaults to settings.PERPLEXITY_MODEL)
            retry_policy: Retry policy (defaults to settings-driven exponential backoff)
            circuit_breaker: Breaker guarding the API (defaults to settings thresholds)
            temperature: Sampling temperature
            max_tokens: Maximum response length

        Raises:
            ValueError: If no API key provided
        """
        self.api_key = api_key or settings.PERPLEXITY_API_KEY
        if not self.api_key:
            raise ValueError("Perplexity API key required")

        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.PERPLEXITY_TIMEOUT)
        )
        self._owns_client = http_client is None
        self.model = model or settings.PERPLEXITY_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry_policy = retry_policy or RetryPolicy.with_retries(
            settings.PERPLEXITY_MAX_RETRIES,
            backoff=ExponentialBackoff(base=1.0, factor=2.0, jitter=True),
            retryable=is_retryable_search_error,
        )
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.PERPLEXITY_CIRCUIT_BREAKER_THRESHOLD,
            timeout=float(settings.PERPLEXITY_CIRCUIT_BREAKER_TIMEOUT),
        )

    async def search(self, request: AISearchRequest) -> str:
        """Run a domain-restricted search.

        Returns:
            Raw assistant message text

        Raises:
            AISearchError: On API failure after retries, or when the circuit is open
        """
        payload = self._build_payload(request)

        logger.info(
            "perplexity_request",
            topic=request.topic[:100],
            model=self.model,
            domain_count=len(request.domain_filter),
        )

        try:
            content = await self.circuit_breaker.call_with_retries(
                self._post, payload, policy=self.retry_policy
            )
        except CircuitOpenError as e:
            logger.warning("perplexity_circuit_open")
            raise AISearchError(str(e)) from e
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("perplexity_error", error=str(e), error_type=type(e).__name__)
            raise AISearchError(f"Perplexity API failed: {e}") from e

        logger.info("perplexity_success", content_length=len(content))
        return content

    def _build_payload(self, request: AISearchRequest) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": request.prompt_context or request.topic},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "search_domain_filter": list(request.domain_filter),
            "return_images": False,
            "return_related_questions": False,
        }

    async def _post(self, payload: dict[str, Any]) -> str:
        response = await self.http_client.post(
            settings.PERPLEXITY_BASE_URL,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()
        data = response.json()
        content = data["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            raise TypeError("message content is not text")
        return content

    async def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client:
            await self.http_client.aclose()
