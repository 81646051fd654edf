# src/api/handlers.py — v1
"""Tool handlers: search_swift_content, get_swift_pattern, list_content_sources.

The two search handlers resolve a request to an IntentKey, serve it from
the intent cache when possible, and otherwise fan out to the sources, rank
the merged results against the query and deduplicate them before caching.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from swiftpatterns.api.formatting import (
    format_no_results,
    format_search_patterns,
    format_source_list,
    format_topic_patterns,
)
from swiftpatterns.api.models import CachedSearchResult, SourceInfo, ToolResponse
from swiftpatterns.cache.intent_cache import IntentCache
from swiftpatterns.cache.models import IntentKey, StorableIntentResult
from swiftpatterns.core.models import Pattern
from swiftpatterns.logging.context import log_context
from swiftpatterns.search.overlap import rank_for_query
from swiftpatterns.search.query_profile import build_query_profile
from swiftpatterns.sources.fanout import FanoutCoordinator
from swiftpatterns.sources.registry import FEED_CONFIGS, resolve_source_ids

logger = logging.getLogger(__name__)

SEARCH_TOOL = "search_swift_content"
PATTERN_TOOL = "get_swift_pattern"
DEFAULT_PATTERN_MIN_QUALITY = 60


@dataclass
class ToolContext:
    """Collaborators shared by every handler invocation."""

    intent_cache: IntentCache
    fanout: FanoutCoordinator
    source_names: dict[str, str]
    max_results: int = 10
    default_min_quality: int = DEFAULT_PATTERN_MIN_QUALITY

    @property
    def source_ids(self) -> list[str]:
        return self.fanout.source_ids


# ---------------------------------------------------------------------------
# Result shaping
# ---------------------------------------------------------------------------


def should_replace_by_quality(existing: Pattern, candidate: Pattern) -> bool:
    """True when ``candidate`` beats ``existing``: higher score, or equal
    score with code where ``existing`` has none."""
    return candidate.relevance_score > existing.relevance_score or (
        candidate.relevance_score == existing.relevance_score
        and candidate.has_code
        and not existing.has_code
    )


def dedupe_patterns(patterns: list[Pattern]) -> list[Pattern]:
    """Collapse duplicate ids, keeping the better copy at the first position."""
    by_id: dict[str, Pattern] = {}
    for pattern in patterns:
        existing = by_id.get(pattern.id)
        if existing is None or should_replace_by_quality(existing, pattern):
            by_id[pattern.id] = pattern
    return list(by_id.values())


def prepare_results(
    patterns: list[Pattern],
    query: str,
    min_quality: int = 0,
    require_code: bool = False,
) -> list[Pattern]:
    """Filter, rank against ``query`` and deduplicate merged source results."""
    filtered = [
        p for p in patterns
        if p.relevance_score >= min_quality and (p.has_code or not require_code)
    ]
    ranked = rank_for_query(filtered, build_query_profile(query), fallback_to_original=True)
    if ranked is filtered:
        ranked = sorted(filtered, key=lambda p: p.relevance_score, reverse=True)
    return dedupe_patterns(ranked)


async def cached_search(
    intent_cache: IntentCache,
    intent_key: IntentKey,
    fetcher: Callable[[], Awaitable[list[Pattern]]],
) -> CachedSearchResult:
    """Serve ``intent_key`` from cache, or run ``fetcher`` once and cache it.

    Empty result sets are returned but never cached, so a later call can
    pick up content that was missing upstream.
    """

    async def _storable() -> StorableIntentResult:
        return StorableIntentResult.from_patterns(await fetcher())

    entry, hit = await intent_cache.get_or_fetch(intent_key, _storable, cache_empty=False)
    logger.debug("Intent %s for %s", "hit" if hit else "miss", intent_key.tool)
    return CachedSearchResult(results=list(entry.patterns or []), was_cache_hit=hit)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def search_swift_content(
    ctx: ToolContext, query: str | None, require_code: bool = False
) -> ToolResponse:
    """Free-text search across every enabled source."""
    if not query or not query.strip():
        return ToolResponse(
            text="Missing required argument: query\n\n"
            'Usage: search_swift_content({ query: "async await" })'
        )

    with log_context(tool=SEARCH_TOOL, query=query):
        try:
            intent = IntentKey(
                tool=SEARCH_TOOL,
                query=query,
                min_quality=0,
                sources=tuple(ctx.source_ids),
                require_code=require_code,
            )

            async def _fetch() -> list[Pattern]:
                merged = await ctx.fanout.search_all(query)
                return prepare_results(merged, query, require_code=require_code)

            outcome = await cached_search(ctx.intent_cache, intent, _fetch)
        except Exception as e:
            logger.exception("search_swift_content failed")
            return ToolResponse.error(str(e))

    if not outcome.results:
        return ToolResponse(
            text=format_no_results(
                query,
                require_code=require_code,
                source_names=_names(ctx, ctx.source_ids),
            )
        )
    return ToolResponse(
        text=format_search_patterns(outcome.results, query, ctx.max_results)
    )


async def get_swift_pattern(
    ctx: ToolContext,
    topic: str | None,
    source: str = "all",
    min_quality: int | None = None,
) -> ToolResponse:
    """Topic lookup in one source or all of them, above a quality floor."""
    if not topic or not topic.strip():
        return ToolResponse(
            text="Missing required argument: topic\n\n"
            'Usage: get_swift_pattern({ topic: "swiftui", source: "all", minQuality: 60 })'
        )

    quality = ctx.default_min_quality if min_quality is None else min_quality

    with log_context(tool=PATTERN_TOOL, query=topic):
        try:
            if not 0 <= quality <= 100:
                raise ValueError(f"min_quality must be within 0..100, got {quality}")
            source_ids = resolve_source_ids(source or "all", ctx.source_ids)
            intent = IntentKey(
                tool=PATTERN_TOOL,
                query=topic,
                min_quality=quality,
                sources=tuple(source_ids),
            )

            async def _fetch() -> list[Pattern]:
                merged = await ctx.fanout.search_all(topic, source_ids)
                return prepare_results(merged, topic, min_quality=quality)

            outcome = await cached_search(ctx.intent_cache, intent, _fetch)
        except Exception as e:
            logger.exception("get_swift_pattern failed")
            return ToolResponse.error(str(e))

    if not outcome.results:
        return ToolResponse(
            text=format_no_results(
                topic, min_quality=quality, source_names=_names(ctx, source_ids)
            )
        )
    return ToolResponse(
        text=format_topic_patterns(outcome.results, topic, ctx.max_results)
    )


def _names(ctx: ToolContext, source_ids: list[str]) -> list[str]:
    return [ctx.source_names.get(sid, sid) for sid in source_ids]


async def list_content_sources(ctx: ToolContext) -> ToolResponse:
    """List every known source with its enabled state."""
    enabled = set(ctx.source_ids)
    infos = [
        SourceInfo(
            source_id=sid,
            name=config.display_name,
            description=config.description,
            enabled=sid in enabled,
        )
        for sid, config in FEED_CONFIGS.items()
    ]
    # Injected sources outside the registry are always enabled
    infos.extend(
        SourceInfo(source_id=sid, name=ctx.source_names.get(sid, sid), enabled=True)
        for sid in ctx.source_ids
        if sid not in FEED_CONFIGS
    )
    return ToolResponse(text=format_source_list(infos))
