"""URL liveness verification.

HEAD first; 200 and 403 count as alive (403 is usually bot-blocking).
Government URLs fall back to GET when HEAD fails, and a government URL that
only ever fails transiently (network/DNS/TLS errors, 5xx) is reported as
``unverified`` instead of ``failed``. PDFs replacing a PDF are not probed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import httpx
import structlog

from ...core.config import settings
from ...core.retry import LinearBackoff, RetryPolicy
from ...models.citation import VerificationResult, VerificationStatus
from ...utils.url_utils import is_pdf_url

logger = structlog.get_logger(__name__)

ALIVE_STATUSES = frozenset({200, 403})


class TransientProbeError(Exception):
    """A probe failed in a way worth retrying (network error or 5xx)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def is_transient_probe_error(exc: BaseException) -> bool:
    return isinstance(exc, TransientProbeError)


class UrlVerifier:
    """Classifies URLs as verified / unverified / failed.

    Example:
        >>> verifier = UrlVerifier(is_government=registry.is_government_url)
        >>> result = await verifier.verify("https://www.boe.es/buscar/act.php?id=BOE-A-1978-31229")
        >>> result.verification_status
        <VerificationStatus.VERIFIED: 'verified'>
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        is_government: Callable[[str], bool] | None = None,
        retry_policy: RetryPolicy | None = None,
        head_timeout: float | None = None,
        get_timeout: float | None = None,
        user_agent: str | None = None,
        max_concurrency: int | None = None,
    ):
        """Initialize verifier.

        Args:
            http_client: Optional custom HTTP client for testing
            is_government: Predicate classifying government URLs (lenient handling)
            retry_policy: Retry policy (defaults to 2 retries, linear 1s backoff)
            head_timeout: HEAD timeout in seconds
            get_timeout: GET fallback timeout in seconds
            user_agent: User-Agent header sent with probes
            max_concurrency: Parallel probes in ``verify_many``
        """
        self.http_client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None
        self.is_government = is_government or (lambda url: False)
        self.retry_policy = retry_policy or RetryPolicy.with_retries(
            settings.VERIFY_MAX_RETRIES,
            backoff=LinearBackoff(base=settings.VERIFY_BACKOFF_SECONDS),
            retryable=is_transient_probe_error,
        )
        self.head_timeout = head_timeout or settings.VERIFY_HEAD_TIMEOUT
        self.get_timeout = get_timeout or settings.VERIFY_GET_TIMEOUT
        self.headers = {"User-Agent": user_agent or settings.VERIFY_USER_AGENT}
        self.max_concurrency = max_concurrency or settings.VERIFY_MAX_CONCURRENCY

    async def verify(self, url: str, original_url: str | None = None) -> VerificationResult:
        """Check that ``url`` is alive.

        Args:
            url: URL to check
            original_url: URL being replaced, if any (enables the PDF exemption)

        Returns:
            VerificationResult; never raises for network problems
        """
        if original_url and is_pdf_url(url) and is_pdf_url(original_url):
            logger.info("verification_skipped_pdf", url=url)
            return VerificationResult(
                url=url,
                verified=False,
                verification_status=VerificationStatus.UNVERIFIED,
                skipped=True,
            )

        is_gov = self.is_government(url)
        try:
            result = await self.retry_policy.execute(self._probe, url, is_gov)
        except TransientProbeError as e:
            status = VerificationStatus.UNVERIFIED if is_gov else VerificationStatus.FAILED
            logger.warning(
                "verification_exhausted",
                url=url,
                government=is_gov,
                status=status.value,
                error=str(e),
            )
            return VerificationResult(
                url=url,
                verified=False,
                status_code=e.status_code,
                verification_status=status,
                error=str(e),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info("verification_failed", url=url, error=str(e))
            return VerificationResult(
                url=url,
                verified=False,
                verification_status=VerificationStatus.FAILED,
                error=f"{type(e).__name__}: {e}",
            )

        logger.debug(
            "verification_complete",
            url=url,
            status=result.verification_status.value,
            status_code=result.status_code,
        )
        return result

    async def verify_many(self, urls: Sequence[str]) -> list[VerificationResult]:
        """Verify URLs concurrently (bounded by ``max_concurrency``), preserving order."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(url: str) -> VerificationResult:
            async with semaphore:
                return await self.verify(url)

        return list(await asyncio.gather(*(_bounded(url) for url in urls)))

    async def _probe(self, url: str, is_gov: bool) -> VerificationResult:
        """One HEAD (plus GET fallback for government URLs) attempt.

        Raises:
            TransientProbeError: On network errors or 5xx
        """
        status_code, error = await self._request("HEAD", url, self.head_timeout)

        if status_code in ALIVE_STATUSES:
            return self._alive(url, status_code)

        if is_gov:
            logger.info("verification_get_fallback", url=url, head_status=status_code, error=error)
            get_status, get_error = await self._request("GET", url, self.get_timeout)
            if get_status in ALIVE_STATUSES:
                return self._alive(url, get_status)
            if get_status is not None:
                status_code, error = get_status, None
            elif status_code is None:
                error = get_error

        if status_code is None:
            raise TransientProbeError(error or "network error")
        if status_code >= 500:
            raise TransientProbeError(f"HTTP {status_code}", status_code=status_code)

        return VerificationResult(
            url=url,
            verified=False,
            status_code=status_code,
            verification_status=VerificationStatus.FAILED,
            error=error or f"HTTP {status_code}",
        )

    async def _request(self, method: str, url: str, timeout: float) -> tuple[int | None, str | None]:
        """Return (status_code, None) or (None, network error)."""
        try:
            response = await self.http_client.request(
                method,
                url,
                headers=self.headers,
                timeout=timeout,
                follow_redirects=True,
            )
        except httpx.TransportError as e:
            return None, f"{type(e).__name__}: {e}"
        return response.status_code, None

    @staticmethod
    def _alive(url: str, status_code: int) -> VerificationResult:
        return VerificationResult(
            url=url,
            verified=True,
            status_code=status_code,
            verification_status=VerificationStatus.VERIFIED,
        )

    async def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client:
            await self.http_client.aclose()
