"""
Retry Policy

One reusable retry loop for async operations. Callers decide which
exceptions are retryable and what happens between attempts (for example
recreating a connection pool before the last attempt).

Usage:
    policy = RetryPolicy(max_attempts=3, is_retryable=lambda exc: isinstance(exc, TimeoutError))
    rows = await policy.run(lambda: connector.execute(sql))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def exponential_backoff(attempt: int) -> float:
    """Delay after the given failed attempt (1-based): 1s, 2s, 4s, ..."""
    return float(2 ** (attempt - 1))


def never_retry(exc: BaseException) -> bool:
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with backoff.

    Attributes:
        max_attempts: Total attempts including the first call
        is_retryable: Predicate deciding whether a failure is worth retrying
        backoff: Seconds to wait after failed attempt ``n`` (1-based)
        sleep: Awaitable sleep, injectable for tests
    """

    max_attempts: int = 3
    is_retryable: Callable[[BaseException], bool] = never_retry
    backoff: Callable[[int], float] = exponential_backoff
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: Callable[[int, BaseException], Awaitable[None]] | None = None,
    ) -> T:
        """
        Run ``operation`` until it succeeds, fails permanently, or attempts run out.

        ``on_retry(next_attempt, error)`` is awaited after the backoff delay and
        before the next attempt. The last error is re-raised unchanged.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                if attempt >= self.max_attempts or not self.is_retryable(exc):
                    raise

                delay = self.backoff(attempt)
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} failed, retrying in {delay}s: {exc}",
                    extra={"attempt": attempt, "max_attempts": self.max_attempts, "delay": delay},
                )
                await self.sleep(delay)
                attempt += 1
                if on_retry is not None:
                    await on_retry(attempt, exc)
