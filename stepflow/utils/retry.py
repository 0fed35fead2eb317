from __future__ import annotations

import asyncio
import random

from ..constants import (
    DEFAULT_RETRY_BACKOFF_BASE,
    DEFAULT_RETRY_INITIAL_DELAY,
    DEFAULT_RETRY_JITTER,
    DEFAULT_RETRY_MAX_DELAY,
)


def compute_backoff(
    attempt: int,
    base: float = DEFAULT_RETRY_BACKOFF_BASE,
    jitter: float = DEFAULT_RETRY_JITTER,
    initial: float = DEFAULT_RETRY_INITIAL_DELAY,
    cap: float = DEFAULT_RETRY_MAX_DELAY,
) -> float:
    """Compute exponential backoff with jitter for the given retry number (1-based)."""
    delay = min(initial * base ** max(attempt - 1, 0), cap)
    if jitter:
        delay += random.uniform(0, jitter)
    return delay


async def sleep_unless(event: asyncio.Event, delay: float) -> bool:
    """Sleep for ``delay`` seconds unless ``event`` gets set first.

    Returns ``True`` when the event cut the sleep short.
    """
    if event.is_set():
        return True
    if delay <= 0:
        await asyncio.sleep(0)
        return event.is_set()
    try:
        await asyncio.wait_for(event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True
