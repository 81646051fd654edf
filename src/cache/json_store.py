# src/cache/json_store.py — v2
"""JSON file-based cache store, the persistent tier of every namespace.

Stores each entry as an individual JSON file ``<file_key>.json`` under the
namespace directory. File I/O runs in a worker thread; every filesystem or
decoding error is logged and reported as a miss or a no-op.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from swiftpatterns.cache.base_cache_store import BaseCacheStore
from swiftpatterns.cache.fingerprint import file_key
from swiftpatterns.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using one JSON file per key."""

    def __init__(self, cache_dir: Path | str) -> None:
        self._root = Path(cache_dir).expanduser()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cache directory %s unavailable: %s", self._root, e)

    @property
    def root(self) -> Path:
        return self._root

    def entry_path(self, key: str) -> Path:
        """Return the file path for a logical cache key."""
        return self._root / f"{file_key(key)}.json"

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key, expired or not."""
        return await asyncio.to_thread(self._read, self.entry_path(key))

    async def put(self, key: str, entry: CacheEntry) -> bool:
        """Store a cache entry."""
        return await asyncio.to_thread(self._write, self.entry_path(key), entry)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        await asyncio.to_thread(self._unlink, self.entry_path(key))

    async def clear(self) -> int:
        """Remove every entry file in the namespace directory."""
        return await asyncio.to_thread(self._clear_sync)

    async def clear_expired(self, now: float) -> int:
        """Remove expired entries and files that no longer decode."""
        return await asyncio.to_thread(self._clear_expired_sync, now)

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> CacheEntry | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(**data)
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None

    def _write(self, path: Path, entry: CacheEntry) -> bool:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(entry.model_dump_json(), encoding="utf-8")
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Failed to write cache entry %s: %s", path.name, e)
            return False

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.debug("Failed to delete cache entry %s: %s", path.name, e)
            return False

    def _entry_files(self) -> list[Path]:
        if not self._root.is_dir():
            return []
        try:
            return [p for p in self._root.iterdir() if p.is_file()]
        except OSError as e:
            logger.debug("Cannot list cache directory %s: %s", self._root, e)
            return []

    def _clear_sync(self) -> int:
        return sum(1 for path in self._entry_files() if self._unlink(path))

    def _clear_expired_sync(self, now: float) -> int:
        removed = 0
        for path in self._entry_files():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                expired = CacheEntry(**data).is_expired(now)
            except (OSError, ValueError, TypeError, ValidationError):
                expired = True
            if expired and self._unlink(path):
                removed += 1
        return removed
