# src/cache/intent_cache.py — v1
"""Intent-aware result cache for tool handlers.

Results are keyed by the normalized intent of a request (tool, query,
quality threshold, source set, code filter) rather than its raw text, so
"SwiftUI navigation" and "navigation swiftui" share one entry. Each stored
result carries the fingerprint of the source set it was computed from; a
lookup whose current source set hashes differently is a miss.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from pydantic import ValidationError

from swiftpatterns.cache.dedup import InflightDeduper
from swiftpatterns.cache.fingerprint import intent_digest, source_fingerprint
from swiftpatterns.cache.models import CachedIntentResult, IntentKey, StorableIntentResult
from swiftpatterns.cache.tiered_cache import TieredCache
from swiftpatterns.search.terms import normalize_tokens

logger = logging.getLogger(__name__)

DEFAULT_INTENT_TTL = 43200
DEFAULT_MAX_MEMORY_ENTRIES = 200


class IntentCache:
    """Caches ranked result metadata by normalized query intent.

    Args:
        cache: TieredCache dedicated to the intent namespace.
        ttl: TTL in seconds applied to stored results.
        clock: Time source for result timestamps.
    """

    def __init__(
        self,
        cache: TieredCache,
        ttl: float = DEFAULT_INTENT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = cache
        self._ttl = ttl
        self._clock = clock
        self._pending_fetches: InflightDeduper[str, CachedIntentResult] = InflightDeduper()
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------
    # Key derivation
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_query(query: str) -> str:
        """Order- and case-independent form of ``query`` (no stemming)."""
        return " ".join(sorted(normalize_tokens(query)))

    @staticmethod
    def get_source_fingerprint(sources: tuple[str, ...] | list[str]) -> str:
        return source_fingerprint(sources)

    def build_cache_key(self, intent: IntentKey) -> str:
        """SHA-256 of ``tool::normalized::q<min>::fingerprint[::code]``."""
        return intent_digest(
            tool=intent.tool,
            normalized_query=self.normalize_query(intent.query),
            min_quality=intent.min_quality,
            fingerprint=self.get_source_fingerprint(intent.sources),
            require_code=intent.require_code,
        )

    # ------------------------------------------------------------------
    # Lookup / store
    # ------------------------------------------------------------------

    async def get(self, intent: IntentKey) -> CachedIntentResult | None:
        """Return the cached result, or None when absent or stale by sources."""
        result = await self._lookup(self.build_cache_key(intent), intent)
        if result is None:
            self._misses += 1
        else:
            self._hits += 1
        return result

    async def set(
        self,
        intent: IntentKey,
        result: StorableIntentResult,
        ttl: float | None = None,
    ) -> CachedIntentResult:
        """Stamp ``result`` with the current fingerprint and store it."""
        key = self.build_cache_key(intent)
        entry = self._stamp(intent, result)
        ttl = self._ttl if ttl is None else ttl
        await self._cache.set(key, entry.model_dump(mode="json"), ttl)
        return entry

    async def get_or_fetch(
        self,
        intent: IntentKey,
        fetcher: Callable[[], Awaitable[StorableIntentResult]],
        ttl: float | None = None,
        cache_empty: bool = True,
    ) -> tuple[CachedIntentResult, bool]:
        """Return ``(result, was_cache_hit)``, fetching once per key on miss.

        Concurrent callers for one intent share a single ``fetcher`` run and
        receive the same result object. Fetcher failures propagate to every
        waiter and nothing is stored. With ``cache_empty=False`` a result
        with no patterns is returned but not stored.
        """
        cached = await self.get(intent)
        if cached is not None:
            return cached, True

        key = self.build_cache_key(intent)
        ttl = self._ttl if ttl is None else ttl

        async def _fetch_and_store() -> CachedIntentResult:
            result = await fetcher()
            entry = self._stamp(intent, result)
            if cache_empty or entry.total_count > 0:
                await self._cache.set(key, entry.model_dump(mode="json"), ttl)
            return entry

        return await self._pending_fetches.run(key, _fetch_and_store), False

    async def clear(self) -> None:
        """Clear all cached intents and reset statistics."""
        await self._cache.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> dict[str, float]:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total else 0.0,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _lookup(self, key: str, intent: IntentKey) -> CachedIntentResult | None:
        raw = await self._cache.get(key)
        if raw is None:
            return None
        try:
            cached = CachedIntentResult.model_validate(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable intent entry %s: %s", key[:12], e)
            return None

        if cached.source_fingerprint != self.get_source_fingerprint(intent.sources):
            logger.debug("Intent entry %s stale: source set changed", key[:12])
            return None
        return cached

    def _stamp(self, intent: IntentKey, result: StorableIntentResult) -> CachedIntentResult:
        return CachedIntentResult(
            **result.model_dump(include=set(StorableIntentResult.model_fields)),
            source_fingerprint=self.get_source_fingerprint(intent.sources),
            timestamp=self._clock(),
        )
