# src/cache/base_cache_store.py — v2
"""Abstract interface for the persistent tier of a cache namespace.

Implementations must never raise on I/O failure: the persistent tier is an
optimization, so an unreadable or unwritable store degrades to misses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from swiftpatterns.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for persistent cache backends."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve an entry regardless of expiry, or None."""

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> bool:
        """Store an entry. Returns False when the write failed."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove an entry if present."""

    @abstractmethod
    async def clear(self) -> int:
        """Remove every entry. Returns the number removed."""

    @abstractmethod
    async def clear_expired(self, now: float) -> int:
        """Remove expired and unreadable entries. Returns the number removed."""
