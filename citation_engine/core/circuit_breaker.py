"""Circuit breaker for the AI search service.

Stops calling a failing service after a run of consecutive failures, then
lets a single probe call through once the cool-down has elapsed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, TypeVar

import structlog

from .exceptions import CircuitOpenError
from .retry import RetryPolicy

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states.

    CLOSED: Normal operation, calls pass through
    OPEN: Service failing, calls rejected immediately
    HALF_OPEN: Testing recovery, one call allowed
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CircuitBreaker:
    """Circuit breaker for fault tolerance.

    Example:
        >>> breaker = CircuitBreaker(failure_threshold=5, timeout=300.0)
        >>> text = await breaker.call(client.post, url, json=payload)

    Attributes:
        failure_threshold: Consecutive failures before opening the circuit
        timeout: Seconds before testing recovery (HALF_OPEN)
        clock: Returns the current UTC time (replaced in tests)
    """

    failure_threshold: int = 5
    timeout: float = 300.0
    clock: Callable[[], datetime] = _utcnow

    state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    failure_count: int = field(default=0, init=False)
    last_failure_time: datetime | None = field(default=None, init=False)

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Execute function with circuit breaker protection.

        Raises:
            CircuitOpenError: If the circuit is open
            Exception: Whatever ``func`` raises
        """
        self._before_call()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    async def call_with_retries(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        policy: RetryPolicy,
        **kwargs: Any,
    ) -> T:
        """Execute function through the breaker, retrying per ``policy``.

        Every attempt counts against the breaker. An open circuit is never retried.
        """
        guarded = RetryPolicy(
            max_attempts=policy.max_attempts,
            backoff=policy.backoff,
            retryable=lambda exc: not isinstance(exc, CircuitOpenError) and policy.retryable(exc),
            sleep=policy.sleep,
        )
        return await guarded.execute(self.call, func, *args, **kwargs)

    def _before_call(self) -> None:
        if self.state != CircuitState.OPEN:
            return
        if self._should_attempt_reset():
            logger.info("circuit_breaker_half_open", failure_count=self.failure_count)
            self.state = CircuitState.HALF_OPEN
            return
        raise CircuitOpenError("Circuit breaker open - service unavailable")

    def _on_success(self) -> None:
        """Handle successful call - reset state to CLOSED."""
        if self.state != CircuitState.CLOSED:
            logger.info("circuit_breaker_closed")
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def _on_failure(self) -> None:
        """Handle failed call - increment count and possibly OPEN circuit."""
        self.failure_count += 1
        self.last_failure_time = self.clock()

        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            if self.state != CircuitState.OPEN:
                logger.warning("circuit_breaker_opened", failure_count=self.failure_count)
            self.state = CircuitState.OPEN

    def _should_attempt_reset(self) -> bool:
        """True once ``timeout`` seconds have passed since the last failure."""
        if not self.last_failure_time:
            return True
        return self.clock() - self.last_failure_time >= timedelta(seconds=self.timeout)
