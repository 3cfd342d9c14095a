"""Explicit retry policies shared by the URL verifier and the AI search client.

A ``RetryPolicy`` bundles the three decisions a retry loop makes:
how many attempts, how long to wait between them, and which errors are
worth retrying at all.

Example:
    >>> policy = RetryPolicy(max_attempts=3, backoff=LinearBackoff(base=1.0))
    >>> result = await policy.execute(client.head, url)
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class BackoffStrategy(Protocol):
    """Delay (seconds) to wait after a failed attempt (1-based)."""

    def delay(self, attempt: int) -> float: ...


@dataclass(frozen=True)
class LinearBackoff:
    """base × attempt: 1s, 2s, 3s, ..."""

    base: float = 1.0

    def delay(self, attempt: int) -> float:
        return self.base * attempt


@dataclass(frozen=True)
class ExponentialBackoff:
    """base × factor^(attempt-1), optionally with up to 100% jitter."""

    base: float = 1.0
    factor: float = 2.0
    jitter: bool = False

    def delay(self, attempt: int) -> float:
        delay = self.base * (self.factor ** (attempt - 1))
        if self.jitter:
            delay *= 1.0 + random.random()
        return delay


def retry_all(exc: BaseException) -> bool:
    """Retry every exception."""
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy: attempts, backoff and retryable-error predicate.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1)
        backoff: Strategy computing the wait after a failed attempt
        retryable: Predicate deciding whether an exception is retried
        sleep: Awaitable sleep (replaced in tests)
    """

    max_attempts: int = 3
    backoff: BackoffStrategy = field(default_factory=LinearBackoff)
    retryable: Callable[[BaseException], bool] = retry_all
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    @classmethod
    def with_retries(
        cls,
        retries: int,
        *,
        backoff: BackoffStrategy | None = None,
        retryable: Callable[[BaseException], bool] = retry_all,
    ) -> RetryPolicy:
        """Build a policy from a retry count (attempts = retries + 1)."""
        return cls(
            max_attempts=retries + 1,
            backoff=backoff or LinearBackoff(),
            retryable=retryable,
        )

    async def execute(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Call ``func`` until it succeeds, the error is not retryable, or attempts run out.

        Raises:
            Exception: The last error raised by ``func``
        """
        attempt = 1
        while True:
            try:
                return await func(*args, **kwargs)
            except Exception as exc:
                if attempt >= self.max_attempts or not self.retryable(exc):
                    raise
                wait = self.backoff.delay(attempt)
                logger.info(
                    "retry_scheduled",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    wait_seconds=wait,
                    error=str(exc),
                )
                await self.sleep(wait)
                attempt += 1
