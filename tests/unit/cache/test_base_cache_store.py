# tests/unit/cache/test_base_cache_store.py — v1
"""Tests for cache/base_cache_store.py — BaseCacheStore ABC."""

from __future__ import annotations

import pytest

from swiftpatterns.cache.base_cache_store import BaseCacheStore
from swiftpatterns.cache.json_store import JsonCacheStore


class TestBaseCacheStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseCacheStore()  # type: ignore[abstract]

    def test_has_required_methods(self):
        for method in ["get", "put", "delete", "clear", "clear_expired"]:
            assert hasattr(BaseCacheStore, method)

    def test_json_store_implements(self, tmp_path):
        assert isinstance(JsonCacheStore(tmp_path), BaseCacheStore)
