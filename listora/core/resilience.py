"""
Retry with exponential backoff for marketplace transport calls.

The policy is an object independent of the call it wraps, so the backoff
schedule and the retryable-error predicate can be tested without any I/O.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx

from listora.core.exceptions import TransportFailureError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


# ─── Retry Policy ─────────────────────────────────────────────


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded, sequential retry with exponential backoff.

    Backoff schedule (with base_delay=2, multiplier=2, max_attempts=3):
        Attempt 1 fails → wait 2s
        Attempt 2 fails → wait 4s
        Attempt 3 fails → TransportFailureError

    Only exceptions in ``retryable`` trigger another attempt. Anything else
    (HTTP status errors, platform rejections, programming errors) passes
    through on the first occurrence.
    """

    max_attempts: int = 3
    base_delay: float = 2.0
    multiplier: float = 2.0
    retryable: tuple[type[BaseException], ...] = (httpx.TransportError, TimeoutError)
    sleep: Sleep = field(default=asyncio.sleep, compare=False, repr=False)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given 1-based failed attempt."""
        return self.base_delay * (self.multiplier ** (attempt - 1))

    def is_retryable(self, exc: BaseException) -> bool:
        return isinstance(exc, self.retryable)

    async def run(self, fn: Callable[[], Awaitable[T]], operation: str = "request") -> T:
        """
        Await ``fn()`` until it succeeds or the attempt budget is spent.

        Raises:
            TransportFailureError: Every attempt failed with a retryable error.
        """
        last_exception: BaseException | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await fn()
            except self.retryable as e:
                last_exception = e

                if attempt == self.max_attempts:
                    logger.error(
                        f"{operation} failed after {self.max_attempts} attempts: "
                        f"{type(e).__name__}: {e}"
                    )
                    break

                delay = self.delay_for(attempt)
                logger.warning(
                    f"{operation} attempt {attempt}/{self.max_attempts} failed: "
                    f"{type(e).__name__}: {e}. Retrying in {delay:.1f}s..."
                )
                await self.sleep(delay)

        raise TransportFailureError(
            attempts=self.max_attempts,
            cause=last_exception if isinstance(last_exception, Exception) else None,
            details={"operation": operation},
        )
