# tests/unit/cache/test_unit_cache_factory.py — v1
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

from swiftpatterns.cache.cache_factory import (
    INTENT_NAMESPACE,
    RSS_NAMESPACE,
    create_cache_store,
    create_tiered_cache,
    namespace_dir,
)
from swiftpatterns.cache.json_store import JsonCacheStore
from swiftpatterns.cache.tiered_cache import TieredCache


class TestCacheFactory:
    def test_namespace_dir(self, tmp_path):
        assert namespace_dir(tmp_path, "rss") == tmp_path / "rss"

    def test_create_store(self, settings, cache_dir):
        store = create_cache_store(RSS_NAMESPACE, settings)
        assert isinstance(store, JsonCacheStore)
        assert store.root == cache_dir / "rss"
        assert store.root.is_dir()

    def test_create_tiered_cache(self, settings):
        cache = create_tiered_cache(INTENT_NAMESPACE, settings)
        assert isinstance(cache, TieredCache)
        assert cache.namespace == "intent"

    def test_overrides(self, settings, clock):
        cache = create_tiered_cache(
            "x", settings, max_memory_entries=3, default_ttl=7, clock=clock
        )
        assert cache._max_memory_entries == 3
        assert cache._default_ttl == 7
