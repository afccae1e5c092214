"""
Bounded worker-pool mapping for external-service calls (resolution, judging).
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def map_with_concurrency(
    items: Sequence[T],
    concurrency: int,
    fn: Callable[[T, int], Awaitable[R]],
) -> List[R]:
    """
    Apply `fn(item, index)` to every item with at most `concurrency` calls in flight.

    N workers share one cursor; each claims the next unclaimed index and writes
    its result into that index's slot, so the output order always matches the
    input order regardless of completion order. The cursor is only touched
    between awaits, so no lock is needed.

    Exceptions raised by `fn` propagate; wrap `fn` for best-effort behaviour.
    """
    results: List[Optional[R]] = [None] * len(items)
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while True:
            i = next_index
            next_index += 1
            if i >= len(items):
                return
            results[i] = await fn(items[i], i)

    workers = [worker() for _ in range(max(1, int(concurrency or 1)))]
    await asyncio.gather(*workers)
    return results  # type: ignore[return-value]
