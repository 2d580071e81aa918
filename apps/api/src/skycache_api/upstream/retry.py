"""Exponential backoff retry for upstream calls."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int, base_delay: float, max_delay: float, jitter: bool
) -> float:
    """Delay before retry number *attempt* (0-based)."""
    delay = min(base_delay * (2**attempt), max_delay)
    if jitter:
        delay *= 0.5 + random.random()
    return delay


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: bool = True,
    retry_if: Callable[[Exception], bool] = lambda exc: True,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``func()`` retrying with backoff while *retry_if* accepts the error.

    The last error is re-raised once retries are exhausted or when
    *retry_if* rejects it.
    """
    for attempt in range(max_retries + 1):
        try:
            return await func()
        except Exception as exc:
            if attempt == max_retries or not retry_if(exc):
                raise
            delay = backoff_delay(attempt, base_delay, max_delay, jitter)
            logger.warning(
                "Retry %d/%d for %s after %.1fs: %s",
                attempt + 1,
                max_retries,
                getattr(func, "__name__", "upstream call"),
                delay,
                exc,
            )
            await sleep(delay)
    msg = "unreachable"
    raise AssertionError(msg)
