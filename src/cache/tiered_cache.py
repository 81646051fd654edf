# src/cache/tiered_cache.py — v1
"""Two-tier namespace cache: bounded in-memory LRU over a persistent store.

Reads go memory first, then disk (repopulating memory on a disk hit).
Writes land in memory synchronously and are persisted by a tracked
background task, so a ``get`` right after a ``set`` always sees the new
value. Concurrent fetch-on-miss calls for one key share a single fetch.

The cache is never a source of truth: persistent-tier failures degrade to
misses, and a fetcher failure is propagated without being cached.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable

from swiftpatterns.cache.base_cache_store import BaseCacheStore
from swiftpatterns.cache.dedup import InflightDeduper
from swiftpatterns.cache.models import CacheEntry, StaleEntry
from swiftpatterns.core.models import HttpMeta

logger = logging.getLogger(__name__)

DEFAULT_TTL = 86400
DEFAULT_MAX_MEMORY_ENTRIES = 500


class TieredCache:
    """Per-namespace cache combining an LRU map with a persistent store.

    Args:
        namespace: Logical partition name (used in logs).
        store: Persistent tier for this namespace.
        max_memory_entries: LRU capacity of the in-memory tier.
        default_ttl: TTL in seconds used when callers do not pass one.
        clock: Returns the current epoch time in seconds.
    """

    def __init__(
        self,
        namespace: str,
        store: BaseCacheStore,
        max_memory_entries: int = DEFAULT_MAX_MEMORY_ENTRIES,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_memory_entries <= 0:
            raise ValueError("max_memory_entries must be > 0")
        self.namespace = namespace
        self._store = store
        self._max_memory_entries = max_memory_entries
        self._default_ttl = default_ttl
        self._clock = clock
        self._memory: OrderedDict[str, CacheEntry] = OrderedDict()
        self._pending_fetches: InflightDeduper[str, Any] = InflightDeduper()
        self._pending_writes: dict[str, asyncio.Task[bool]] = {}
        self._sweeper: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss or expiry."""
        now = self._clock()
        entry = self._memory.get(key)
        if entry is not None:
            if not entry.is_expired(now):
                self._memory.move_to_end(key)
                return entry.data
            # Another instance may have written a fresher copy to disk.
            del self._memory[key]

        entry = await self._read_settled(key)
        if entry is None or entry.is_expired(now):
            return None

        self._remember(key, entry)
        return entry.data

    async def get_expired_entry(self, key: str) -> StaleEntry | None:
        """Return data and validators regardless of TTL expiry."""
        entry = self._memory.get(key)
        if entry is None:
            entry = await self._read_settled(key)
        if entry is None:
            return None
        return StaleEntry(data=entry.data, http_meta=entry.http_meta)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set(
        self,
        key: str,
        data: Any,
        ttl: float | None = None,
        http_meta: HttpMeta | None = None,
    ) -> None:
        """Store a value in memory now and persist it in the background."""
        entry = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=self._default_ttl if ttl is None else ttl,
            http_meta=http_meta,
        )
        self._remember(key, entry)
        self._persist(key, entry)

    async def refresh_ttl(self, key: str, ttl: float) -> bool:
        """Reset age and TTL of an existing entry without refetching.

        Works on valid and expired entries; returns False for missing keys.
        """
        entry = self._memory.get(key)
        if entry is None:
            entry = await self._read_settled(key)
        if entry is None:
            return False

        refreshed = entry.model_copy(update={"timestamp": self._clock(), "ttl": ttl})
        self._remember(key, refreshed)
        self._persist(key, refreshed)
        return True

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
    ) -> Any:
        """Return the cached value or run ``fetcher`` once for all waiters."""
        cached = await self.get(key)
        if cached is not None:
            logger.debug("Cache hit [%s] %s", self.namespace, key)
            return cached

        async def _fetch_and_store() -> Any:
            data = await fetcher()
            await self.set(key, data, ttl)
            return data

        logger.debug("Cache miss [%s] %s", self.namespace, key)
        return await self._pending_fetches.run(key, _fetch_and_store)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear(self) -> None:
        """Wipe both tiers."""
        self._memory.clear()
        await self.flush()
        removed = await self._store.clear()
        logger.info("Cleared cache namespace %s (%d files)", self.namespace, removed)

    async def clear_expired(self) -> int:
        """Remove expired entries from both tiers. Returns the count removed."""
        now = self._clock()
        expired = [k for k, e in self._memory.items() if e.is_expired(now)]
        for key in expired:
            del self._memory[key]
        await self.flush()
        removed = len(expired) + await self._store.clear_expired(now)
        if removed:
            logger.debug("Swept %d expired entries from %s", removed, self.namespace)
        return removed

    def start_sweeper(self, interval: float) -> asyncio.Task[None]:
        """Start the periodic expiry sweep owned by this cache.

        Must be called from a running event loop. The task is cancelled by
        ``close()``; calling this twice returns the existing task.
        """
        if interval <= 0:
            raise ValueError("sweep interval must be > 0")
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(
                self._sweep_loop(interval), name=f"cache-sweep-{self.namespace}"
            )
        return self._sweeper

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.clear_expired()
            except Exception:
                logger.warning(
                    "Expiry sweep failed for %s", self.namespace, exc_info=True
                )

    async def flush(self) -> None:
        """Wait for outstanding background writes."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes.values()))

    async def close(self) -> None:
        """Stop the sweeper and flush pending writes."""
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        await self.flush()

    def __len__(self) -> int:
        return len(self._memory)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _remember(self, key: str, entry: CacheEntry) -> None:
        self._memory[key] = entry
        self._memory.move_to_end(key)
        while len(self._memory) > self._max_memory_entries:
            self._memory.popitem(last=False)

    async def _read_settled(self, key: str) -> CacheEntry | None:
        # An entry evicted from memory may still be on its way to disk.
        pending = self._pending_writes.get(key)
        if pending is not None:
            await asyncio.wait([pending])
        return await self._store.get(key)

    def _persist(self, key: str, entry: CacheEntry) -> None:
        # Writes for one key are chained so the newest entry lands last.
        previous = self._pending_writes.get(key)
        task = asyncio.get_running_loop().create_task(
            self._write_after(previous, key, entry)
        )
        self._pending_writes[key] = task
        task.add_done_callback(lambda done: self._write_done(key, done))

    async def _write_after(
        self, previous: asyncio.Task[bool] | None, key: str, entry: CacheEntry
    ) -> bool:
        if previous is not None:
            await asyncio.wait([previous])
        return await self._store.put(key, entry)

    def _write_done(self, key: str, task: asyncio.Task[bool]) -> None:
        if self._pending_writes.get(key) is task:
            del self._pending_writes[key]
