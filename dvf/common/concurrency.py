"""Bounded fan-out for per-group pipeline work."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Awaitable, Callable, Iterable, TypeVar

from dvf.common.constants import DEFAULT_CONCURRENCY

T = TypeVar("T")


async def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[object]],
    *,
    limit: int = DEFAULT_CONCURRENCY,
) -> int:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    A fixed pool of ``limit`` tasks drains a shared queue, so extra items wait
    instead of being rejected. All workers are joined before returning the
    number of items processed. The first failure cancels the remaining
    workers and is re-raised as is.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    queue: deque[T] = deque(items)
    processed = 0

    async def _drain() -> None:
        nonlocal processed
        while queue:
            item = queue.popleft()
            await worker(item)
            processed += 1

    workers = [asyncio.create_task(_drain()) for _ in range(min(limit, len(queue)))]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        raise
    return processed
