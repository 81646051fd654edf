# src/core/concurrency.py — v1
"""Bounded worker pool for bulk async operations.

Used wherever one source fetches many items (for example full articles of
a feed) so the number of simultaneous upstream requests stays fixed.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def run_with_concurrency(
    items: Sequence[T],
    limit: int,
    worker: Callable[[T], Awaitable[R]],
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``limit`` in flight.

    Args:
        items: Inputs to process.
        limit: Pool width. Must be a positive integer.
        worker: Coroutine function applied to each item. Errors propagate.

    Returns:
        Results in the same order as ``items``.

    Raises:
        ValueError: If ``limit`` is not a positive integer.
    """
    if not items:
        return []

    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError(
            f"Invalid concurrency limit: {limit!r}. Must be a positive integer."
        )

    results: list[R | None] = [None] * len(items)
    next_index = 0

    async def _run_worker() -> None:
        nonlocal next_index
        while next_index < len(items):
            current = next_index
            next_index += 1
            results[current] = await worker(items[current])

    await asyncio.gather(
        *(_run_worker() for _ in range(min(limit, len(items))))
    )
    return results  # type: ignore[return-value]
