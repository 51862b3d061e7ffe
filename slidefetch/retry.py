"""
Retry policy for network calls.

A policy is a plain configuration value: how many attempts, how long to wait
between them, and which exceptions count as transient. ``run`` applies it to
any coroutine factory.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import httpx

from slidefetch.errors import FetchExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded attempts with exponential backoff between them."""

    max_attempts: int = 3
    base_delay: float = 1.0          # Seconds before the second attempt
    multiplier: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (httpx.HTTPError,)
    sleep: Sleep = field(default=asyncio.sleep, repr=False, compare=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay(self, attempt: int) -> float:
        """Wait after failed attempt number ``attempt`` (1-based)."""
        return self.base_delay * (self.multiplier ** (attempt - 1))

    async def run(self, operation: Callable[[], Awaitable[T]], url: str) -> T:
        """
        Run ``operation`` until it succeeds or the attempts run out.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            url: Resource being fetched, reported in logs and errors

        Returns:
            Whatever ``operation`` returns on its first successful attempt

        Raises:
            FetchExhausted: If every attempt failed with a retryable error
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except self.retry_on as e:
                last_error = e
                if attempt == self.max_attempts:
                    break
                wait = self.delay(attempt)
                logger.warning(
                    f"[Retry] Attempt {attempt}/{self.max_attempts} failed for {url[:80]}: {e}. "
                    f"Retrying in {wait:.1f}s"
                )
                await self.sleep(wait)

        logger.error(f"[Retry] Giving up on {url[:80]} after {self.max_attempts} attempts")
        raise FetchExhausted(url, self.max_attempts, last_error)
