"""Retry async operations with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry and how long to wait between attempts.

    ``attempts`` counts retries after the first call, so an operation runs
    at most ``attempts + 1`` times.
    """

    attempts: int = 10
    min_delay: float = 1.0
    max_delay: float = 30.0
    factor: float = 2.0

    def delay(self, retry_number: int) -> float:
        """Seconds to wait before retry ``retry_number`` (0-based)."""
        # 1s, 2s, 4s, ... capped at max_delay
        return min(self.max_delay, self.min_delay * (self.factor ** max(0, retry_number)))


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the policy is exhausted.

    Only exceptions matching ``retry_on`` are retried; anything else
    propagates immediately. After the final attempt the last exception is
    re-raised unchanged.
    """
    policy = policy or RetryPolicy()
    retry_number = 0
    while True:
        try:
            return await operation()
        except retry_on as e:
            if retry_number >= policy.attempts:
                logger.warning("Giving up after %d attempt(s): %s", retry_number + 1, e)
                raise
            wait = policy.delay(retry_number)
            retry_number += 1
            logger.warning(
                "Attempt %d failed (%s), retrying in %.1fs", retry_number, e, wait
            )
            await sleep(wait)
