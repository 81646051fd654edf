# src/cache/dedup.py — v1
"""In-flight coalescing of concurrent async operations.

N callers asking for the same key while an execution is running all await
that single execution. The in-flight record is dropped as soon as the
execution settles, success or failure, so the next call runs again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class InflightDeduper(Generic[K, V]):
    """Keyed coalescing of coroutine executions (one in flight per key)."""

    def __init__(self) -> None:
        self._inflight: dict[K, asyncio.Task[V]] = {}

    async def run(self, key: K, task: Callable[[], Awaitable[V]]) -> V:
        """Run ``task`` for ``key`` unless an execution is already in flight.

        Waiters are shielded so cancelling one caller does not cancel the
        shared execution for the others. A failure propagates to every
        waiter of that execution.
        """
        existing = self._inflight.get(key)
        if existing is None:
            existing = asyncio.ensure_future(self._execute(key, task))
            self._inflight[key] = existing
        else:
            logger.debug("Coalescing concurrent call for key %r", key)
        return await asyncio.shield(existing)

    async def _execute(self, key: K, task: Callable[[], Awaitable[V]]) -> V:
        try:
            return await task()
        finally:
            self._inflight.pop(key, None)

    def is_inflight(self, key: K) -> bool:
        return key in self._inflight

    def __len__(self) -> int:
        return len(self._inflight)
