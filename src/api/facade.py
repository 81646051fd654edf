# src/api/facade.py — v1
"""Public API facade: PatternService wires caches, sources and handlers.

Usage:
    async with PatternService() as service:
        response = await service.search("async await")

One TieredCache per namespace (rss, articles, intent) is built here and
threaded into the sources and handlers that use it.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from swiftpatterns.api.handlers import (
    ToolContext,
    get_swift_pattern,
    list_content_sources,
    search_swift_content,
)
from swiftpatterns.api.models import ToolResponse
from swiftpatterns.cache.cache_factory import (
    ARTICLE_NAMESPACE,
    INTENT_NAMESPACE,
    RSS_NAMESPACE,
    create_tiered_cache,
)
from swiftpatterns.cache.intent_cache import IntentCache
from swiftpatterns.cache.tiered_cache import TieredCache
from swiftpatterns.config.settings import Settings
from swiftpatterns.sources.base_source import BasePatternSource
from swiftpatterns.sources.fanout import FanoutCoordinator
from swiftpatterns.sources.http import HttpClient
from swiftpatterns.sources.registry import build_sources

logger = logging.getLogger(__name__)


class PatternService:
    """Composition root for the retrieval backbone.

    Args:
        settings: Application settings. Loaded from .env if None.
        sources: Pre-built sources keyed by id. When omitted, the sources
            named by ``settings.enabled_sources`` are built from the registry.
        http_client: Optional ``httpx.AsyncClient`` for the shared transport.
        clock: Time source handed to every cache.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        sources: dict[str, BasePatternSource] | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or Settings()
        s = self.settings

        self.feed_cache: TieredCache = create_tiered_cache(
            RSS_NAMESPACE, s, default_ttl=s.rss_cache_ttl, clock=clock
        )
        self.article_cache: TieredCache = create_tiered_cache(
            ARTICLE_NAMESPACE, s, default_ttl=s.article_cache_ttl, clock=clock
        )
        self.intent_store: TieredCache = create_tiered_cache(
            INTENT_NAMESPACE,
            s,
            max_memory_entries=s.intent_memory_max_entries,
            default_ttl=s.intent_cache_ttl,
            clock=clock,
        )

        self.http = HttpClient(
            timeout=s.http_timeout, user_agent=s.http_user_agent, client=http_client
        )
        if sources is None:
            sources = dict(build_sources(
                s.enabled_sources_list,
                http=self.http,
                feed_cache=self.feed_cache,
                article_cache=self.article_cache,
                fetch_concurrency=s.fetch_concurrency,
                fetch_full_articles=s.fetch_full_articles,
                feed_ttl=s.rss_cache_ttl,
                article_ttl=s.article_cache_ttl,
            ))
        self.sources = sources

        self.fanout = FanoutCoordinator(sources)
        self.intent_cache = IntentCache(self.intent_store, ttl=s.intent_cache_ttl, clock=clock)
        self.context = ToolContext(
            intent_cache=self.intent_cache,
            fanout=self.fanout,
            source_names={sid: src.display_name for sid, src in sources.items()},
            max_results=s.max_results,
            default_min_quality=s.default_min_quality,
        )

    @property
    def caches(self) -> list[TieredCache]:
        return [self.feed_cache, self.article_cache, self.intent_store]

    # --- Tools ---

    async def search(self, query: str, require_code: bool = False) -> ToolResponse:
        return await search_swift_content(self.context, query, require_code)

    async def get_pattern(
        self, topic: str, source: str = "all", min_quality: int | None = None
    ) -> ToolResponse:
        return await get_swift_pattern(self.context, topic, source, min_quality)

    async def list_sources(self) -> ToolResponse:
        return await list_content_sources(self.context)

    # --- Maintenance ---

    async def clear_caches(self) -> None:
        """Wipe every namespace and reset intent statistics."""
        await self.feed_cache.clear()
        await self.article_cache.clear()
        await self.intent_cache.clear()

    async def sweep_caches(self) -> int:
        """Drop expired entries from every namespace; returns the count."""
        removed = 0
        for cache in self.caches:
            removed += await cache.clear_expired()
        return removed

    # --- Lifecycle ---

    def start(self) -> None:
        """Start background expiry sweeps (requires a running loop)."""
        interval = self.settings.cache_sweep_interval
        if interval > 0:
            for cache in self.caches:
                cache.start_sweeper(interval)

    async def close(self) -> None:
        """Stop sweeps, flush pending writes and close the HTTP client."""
        for cache in self.caches:
            await cache.close()
        await self.http.close()
        logger.debug("Intent cache stats at shutdown: %s", self.intent_cache.get_stats())

    async def __aenter__(self) -> PatternService:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
