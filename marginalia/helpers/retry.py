"""Retry an async operation with exponential backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

BACKOFF_BASE = 5


async def retry_with_backoff(
    operation: Callable[[int, int], Awaitable[T]],
    max_retries: int = 5,
    initial_delay: float = 0.2,
) -> T:
    """Call `operation(attempt, max_retries)` until it succeeds.

    Makes at most `max_retries` attempts. The first retry waits
    `initial_delay` seconds and each later one waits five times longer than
    the previous (0.2s, 1s, 5s, ...). When every attempt fails, the error
    from the last attempt is raised unchanged.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    attempt = 0
    while True:
        try:
            return await operation(attempt, max_retries)
        except Exception as error:
            attempt += 1
            if attempt >= max_retries:
                raise
            delay = initial_delay * BACKOFF_BASE ** (attempt - 1)
            logger.warning(
                "Attempt %d/%d failed, retrying in %.1fs: %s",
                attempt, max_retries, delay, error,
            )
            await asyncio.sleep(delay)
