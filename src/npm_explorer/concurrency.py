"""Fan-out helper for issuing independent requests concurrently."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_map(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: Optional[int] = None,
) -> list[R]:
    """Run ``func`` on every item concurrently and collect the results.

    Args:
        func: Coroutine function applied to each item.
        items: Inputs. Results are returned in the same order.
        limit: Maximum number of calls in flight. None runs them all at once.

    Returns:
        One result per item, in input order.

    Raises:
        ValueError: If ``limit`` is not positive.
        Exception: The first exception raised by ``func``. Branches that must
            not fail should return an ``Enriched`` value instead of raising.
    """
    if limit is not None and limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")

    if limit is None:
        return list(await asyncio.gather(*(func(item) for item in items)))

    semaphore = asyncio.Semaphore(limit)

    async def bounded(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(bounded(item) for item in items)))
