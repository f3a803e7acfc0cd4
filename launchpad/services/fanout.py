# FILE: launchpad/services/fanout.py
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger("launchpad.fanout")

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CONCURRENCY = 10


async def enrich_each(
    items: Sequence[T],
    fetch: Callable[[T], Awaitable[Optional[R]]],
    limit: int = DEFAULT_CONCURRENCY,
    label: Callable[[T], str] = str,
) -> List[Optional[R]]:
    """
    Run ``fetch`` once per item, at most ``limit`` at a time, and return the
    results in item order.

    Best effort: an item whose fetch raises gets None and the failure is
    logged. The other items are unaffected and the call itself never fails.
    """
    if not items:
        return []

    semaphore = asyncio.Semaphore(max(1, limit))

    async def _one(item: T) -> Optional[R]:
        async with semaphore:
            try:
                return await fetch(item)
            except Exception as e:
                logger.warning(f"Enrichment failed for {label(item)}: {e}")
                return None

    return list(await asyncio.gather(*(_one(item) for item in items)))
