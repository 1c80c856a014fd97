"""
Bounded retries with exponential backoff and jitter around one model call.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from ..exceptions import ProviderError, error_summary
from .streaming import StreamingEmitter

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER_RATIO = 0.25


class RetryPolicy:
    """
    Retry a model call on transient provider errors.

    ``max_retries`` is the total number of attempts (at least one is always
    made). The delay before attempt ``n + 1`` is
    ``min(base_delay * 2 ** (n - 1), max_delay)`` perturbed by a uniform
    jitter of +/-25%. Errors that are not retryable surface immediately.

    Args:
        max_retries: Total attempts per call.
        base_delay: Delay after the first failure, in seconds.
        max_delay: Cap applied before jitter, in seconds.
        emitter: Receives a recoverable ``error`` event before each backoff sleep.
        sleep: Awaitable sleep, replaceable in tests.
        uniform: Random source ``(low, high) -> float``, replaceable in tests.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 32.0,
        emitter: Optional[StreamingEmitter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        uniform: Callable[[float, float], float] = random.uniform,
    ):
        self.max_attempts = max(max_retries, 1)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.emitter = emitter or StreamingEmitter()
        self._sleep = sleep
        self._uniform = uniform

    def backoff_delay(self, attempt: int) -> float:
        """Jittered delay to wait after failed attempt number ``attempt`` (1-based)."""
        delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        spread = delay * JITTER_RATIO
        return max(0.0, delay + self._uniform(-spread, spread))

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Await ``operation()`` until it succeeds or attempts run out.

        Raises:
            ProviderError: The last error once attempts are exhausted, or the
                first non-retryable one.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except ProviderError as exc:
                if not exc.retryable:
                    logger.warning("Non-retryable provider error: %s", exc)
                    raise
                if attempt >= self.max_attempts:
                    logger.warning(
                        "Provider call failed after %d attempt(s): %s", attempt, exc
                    )
                    raise
                delay = self.backoff_delay(attempt)
                logger.warning(
                    "Provider error on attempt %d/%d, retrying in %.2fs: %s",
                    attempt,
                    self.max_attempts,
                    delay,
                    exc,
                )
                await self.emitter.error(error_summary(exc), recoverable=True)
                await self._sleep(delay)


__all__ = ["RetryPolicy", "JITTER_RATIO"]
