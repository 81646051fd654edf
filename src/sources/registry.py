# src/sources/registry.py — v1
"""Registry of the built-in feed sources.

Maps source ids to their feed configuration and builds source instances
wired to shared caches and HTTP transport.
"""

from __future__ import annotations

from collections.abc import Sequence

from swiftpatterns.cache.tiered_cache import TieredCache
from swiftpatterns.sources.analysis import merge_quality_signals, merge_topic_keywords
from swiftpatterns.sources.http import HttpClient
from swiftpatterns.sources.rss_source import FeedConfig, RssPatternSource

FEED_CONFIGS: dict[str, FeedConfig] = {
    "sundell": FeedConfig(
        source_id="sundell",
        display_name="Swift by Sundell",
        description="In-depth Swift articles and patterns from John Sundell",
        feed_url="https://www.swiftbysundell.com/feed.xml",
        topic_keywords=merge_topic_keywords({
            "testing": ["unittest"],
            "architecture": ["viper"],
            "concurrency": ["thread"],
            "protocols": ["associated type"],
            "performance": ["speed"],
        }),
        quality_signals=merge_quality_signals({
            "swift": 10, "swiftui": 10, "ios": 8, "testing": 7,
            "architecture": 7, "pattern": 6, "best practice": 8,
        }),
    ),
    "vanderlee": FeedConfig(
        source_id="vanderlee",
        display_name="Antoine van der Lee",
        description="Practical iOS development tips and performance guides",
        feed_url="https://www.avanderlee.com/feed/",
        topic_keywords=merge_topic_keywords({
            "debugging": ["debug", "breakpoint", "lldb", "xcode"],
            "combine": ["combine", "publisher", "subscriber"],
            "tooling": ["xcode", "git", "ci", "fastlane"],
            "performance": ["leak", "profiling"],
        }),
        quality_signals=merge_quality_signals({
            "fix": 4, "solve": 4, "performance": 8, "memory": 7,
            "debugging": 7, "leak": 6, "optimization": 7, "profiling": 6,
            "xcode": 5, "instruments": 6, "ci": 4, "fastlane": 4,
        }),
        fetch_full_article=True,
        article_selectors=(".post-content", "article"),
    ),
    "nilcoalescing": FeedConfig(
        source_id="nilcoalescing",
        display_name="Nil Coalescing",
        description="SwiftUI-focused Swift patterns and tutorials",
        feed_url="https://nilcoalescing.com/feed.rss",
        topic_keywords=merge_topic_keywords({
            "swiftui": ["navigation", "animation", "layout", "viewbuilder"],
            "concurrency": ["async/await", "task", "actor"],
            "testing": ["snapshot", "unit test"],
            "accessibility": ["accessibility", "voiceover"],
        }),
        quality_signals=merge_quality_signals({
            "swiftui": 7, "navigation": 5, "animation": 4, "layout": 4,
            "accessibility": 6, "async": 6, "await": 6, "actor": 6,
            "testing": 7, "snapshot": 6,
        }),
    ),
}


def resolve_source_ids(
    selection: str | Sequence[str],
    available: Sequence[str],
) -> list[str]:
    """Resolve ``"all"``, a single id, or a list of ids against ``available``.

    Raises:
        ValueError: If any requested id is not available.
    """
    if selection == "all":
        return list(available)
    requested = [selection] if isinstance(selection, str) else list(selection)
    unknown = [s for s in requested if s not in available]
    if unknown:
        raise ValueError(
            f"Unknown source(s): {', '.join(unknown)}. "
            f"Available: {', '.join(available)}"
        )
    return list(dict.fromkeys(requested))


def build_sources(
    source_ids: Sequence[str],
    http: HttpClient,
    feed_cache: TieredCache,
    article_cache: TieredCache | None = None,
    fetch_concurrency: int = 5,
    fetch_full_articles: bool = True,
    feed_ttl: int | None = None,
    article_ttl: int | None = None,
) -> dict[str, RssPatternSource]:
    """Instantiate the configured sources for ``source_ids``.

    ``fetch_full_articles=False`` disables article enrichment for every
    source regardless of its own configuration.
    """
    sources: dict[str, RssPatternSource] = {}
    for sid in resolve_source_ids(list(source_ids), list(FEED_CONFIGS)):
        config = FEED_CONFIGS[sid]
        update: dict[str, object] = {}
        if not fetch_full_articles:
            update["fetch_full_article"] = False
        if feed_ttl is not None:
            update["feed_ttl"] = feed_ttl
        if article_ttl is not None:
            update["article_ttl"] = article_ttl
        if update:
            config = config.model_copy(update=update)
        sources[sid] = RssPatternSource(
            config=config,
            http=http,
            feed_cache=feed_cache,
            article_cache=article_cache,
            fetch_concurrency=fetch_concurrency,
        )
    return sources
