"""Bounded worker pool and per-call timeouts."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolError:
    """Marker stored in a result slot whose task raised."""

    error: str


async def run_pool(
    items: Sequence[T],
    worker: Callable[[T, int], Awaitable[R]],
    concurrency: int,
) -> list[R | PoolError]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    ``min(concurrency, len(items))`` workers pull the next index from a shared
    cursor until the items are exhausted. Each result is written at its
    item's index, so the output order matches ``items`` regardless of
    completion order. A task that raises leaves a ``PoolError`` in its slot
    and does not affect the others. Cancellation of the caller cancels every
    worker.

    Args:
        items: Work items.
        worker: Coroutine function called with ``(item, index)``.
        concurrency: Maximum number of concurrent tasks (at least 1).

    Returns:
        One result or ``PoolError`` per item, in input order.
    """
    results: list[R | PoolError] = [PoolError("not processed")] * len(items)
    cursor = 0

    async def loop() -> None:
        nonlocal cursor
        while cursor < len(items):
            index = cursor
            cursor += 1
            try:
                results[index] = await worker(items[index], index)
            except Exception as e:
                logger.warning(f"Pool task {index} failed: {e!r}")
                results[index] = PoolError(str(e) or type(e).__name__)

    workers = min(max(1, concurrency), len(items))
    await asyncio.gather(*(loop() for _ in range(workers)))
    return results


async def with_timeout(awaitable: Awaitable[T], timeout_s: float | None) -> T:
    """Await ``awaitable``, raising ``TimeoutError`` after ``timeout_s`` seconds.

    ``None`` waits indefinitely.
    """
    if timeout_s is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout=timeout_s)
