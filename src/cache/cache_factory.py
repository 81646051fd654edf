# src/cache/cache_factory.py — v3
"""Factory for namespace cache instantiation.

Each namespace gets its own directory under ``cache_root`` and its own
TieredCache instance; instances are never shared across namespaces.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from swiftpatterns.cache.json_store import JsonCacheStore
from swiftpatterns.cache.tiered_cache import TieredCache
from swiftpatterns.config.settings import Settings

RSS_NAMESPACE = "rss"
ARTICLE_NAMESPACE = "articles"
INTENT_NAMESPACE = "intent"


def namespace_dir(cache_root: Path | str, namespace: str) -> Path:
    """Directory holding the persisted entries of one namespace."""
    return Path(cache_root).expanduser() / namespace


def create_cache_store(
    namespace: str, settings: Settings | None = None
) -> JsonCacheStore:
    """Instantiate the persistent tier for ``namespace``."""
    settings = settings or Settings()
    return JsonCacheStore(namespace_dir(settings.cache_root, namespace))


def create_tiered_cache(
    namespace: str,
    settings: Settings | None = None,
    max_memory_entries: int | None = None,
    default_ttl: float | None = None,
    clock: Callable[[], float] = time.time,
) -> TieredCache:
    """Build a TieredCache for ``namespace`` from settings.

    Args:
        namespace: Logical partition, e.g. "rss", "articles", "intent".
        settings: Application settings. Defaults are loaded from .env.
        max_memory_entries: Override of the LRU capacity.
        default_ttl: Override of the default TTL in seconds.
        clock: Time source, injectable for tests.
    """
    settings = settings or Settings()
    return TieredCache(
        namespace=namespace,
        store=create_cache_store(namespace, settings),
        max_memory_entries=max_memory_entries or settings.cache_memory_max_entries,
        default_ttl=default_ttl or settings.cache_default_ttl,
        clock=clock,
    )
