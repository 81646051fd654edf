# src/sources/rss_source.py — v1
"""RSS/Atom-backed pattern source with conditional revalidation.

Flow of ``fetch_all``:
  1. Valid entry in the feed cache -> serve it.
  2. Otherwise read the stale entry (if any) and revalidate with its
     ETag / Last-Modified.
  3. 304 -> refresh the stale entry's TTL and serve it.
  4. 200 -> parse with feedparser, score each item, store with new validators.

Concurrent ``fetch_all`` calls on one source share a single load.
"""

from __future__ import annotations

import functools
import io
import logging

import feedparser
from pydantic import BaseModel, ConfigDict, Field

from swiftpatterns.cache.dedup import InflightDeduper
from swiftpatterns.cache.tiered_cache import TieredCache
from swiftpatterns.core.concurrency import run_with_concurrency
from swiftpatterns.core.models import Pattern
from swiftpatterns.search.overlap import compare_by_overlap_then_score, score_candidates
from swiftpatterns.search.query_profile import build_query_profile
from swiftpatterns.sources.analysis import (
    calculate_relevance,
    detect_topics,
    extract_article_text,
    has_code_content,
    html_to_text,
)
from swiftpatterns.sources.base_source import BasePatternSource
from swiftpatterns.sources.http import HttpClient, SourceFetchError

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 300
DEFAULT_FEED_TTL = 3600
DEFAULT_ARTICLE_TTL = 86400
DEFAULT_FETCH_CONCURRENCY = 5


class FeedConfig(BaseModel):
    """Static description of one feed-backed source."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    display_name: str
    feed_url: str
    description: str = ""
    topic_keywords: dict[str, list[str]] = Field(default_factory=dict)
    quality_signals: dict[str, int] = Field(default_factory=dict)
    fetch_full_article: bool = False
    article_selectors: tuple[str, ...] = ()
    feed_ttl: int = DEFAULT_FEED_TTL
    article_ttl: int = DEFAULT_ARTICLE_TTL

    @property
    def cache_key(self) -> str:
        return f"{self.source_id}-patterns"


class RssPatternSource(BasePatternSource):
    """Pattern source reading one RSS/Atom feed.

    Args:
        config: Feed description.
        http: Shared HTTP transport.
        feed_cache: TieredCache for parsed feeds ("rss" namespace).
        article_cache: TieredCache for article bodies ("articles"
            namespace). Required only when full-article fetching is on.
        fetch_concurrency: Worker-pool width for article fetches.
    """

    def __init__(
        self,
        config: FeedConfig,
        http: HttpClient,
        feed_cache: TieredCache,
        article_cache: TieredCache | None = None,
        fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY,
    ) -> None:
        self.config = config
        self.source_id = config.source_id
        self.display_name = config.display_name
        self._http = http
        self._feed_cache = feed_cache
        self._article_cache = article_cache
        self._fetch_concurrency = fetch_concurrency
        self._pending: InflightDeduper[str, list[Pattern]] = InflightDeduper()

    async def fetch_all(self) -> list[Pattern]:
        return await self._pending.run(self.config.cache_key, self._load)

    async def search(self, query: str) -> list[Pattern]:
        """Patterns sharing at least one token with ``query``, best first.

        Scores stay at the static per-item relevance; the overlap boost is
        applied once, when merged results are ranked.
        """
        patterns = await self.fetch_all()
        profile = build_query_profile(query)
        if not profile.weighted_tokens:
            return patterns

        scored = [
            sc for sc in score_candidates(patterns, profile, boost=False)
            if sc.overlap.matched_tokens > 0
        ]
        scored.sort(key=functools.cmp_to_key(compare_by_overlap_then_score))
        return [sc.candidate for sc in scored]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load(self) -> list[Pattern]:
        key = self.config.cache_key
        cached = await self._feed_cache.get(key)
        if cached is not None:
            return [Pattern.model_validate(p) for p in cached]

        stale = await self._feed_cache.get_expired_entry(key)
        response = await self._http.fetch_conditional(
            self.config.feed_url, stale.http_meta if stale else None
        )

        if response.not_modified:
            if stale is not None:
                logger.info("Feed %s not modified, reusing cached copy", self.source_id)
                await self._feed_cache.refresh_ttl(key, self.config.feed_ttl)
                return [Pattern.model_validate(p) for p in stale.data]
            response = await self._http.fetch_conditional(self.config.feed_url)

        patterns = await self._parse_feed(response.data or "")
        await self._feed_cache.set(
            key,
            [p.model_dump(mode="json") for p in patterns],
            self.config.feed_ttl,
            response.http_meta,
        )
        logger.info("Fetched %d patterns from %s", len(patterns), self.source_id)
        return patterns

    async def _parse_feed(self, text: str) -> list[Pattern]:
        feed = feedparser.parse(io.BytesIO(text.encode("utf-8")))
        if feed.bozo and not feed.entries:
            raise SourceFetchError(
                self.config.feed_url, f"unparseable feed ({feed.get('bozo_exception')})"
            )
        return await run_with_concurrency(
            list(feed.entries), self._fetch_concurrency, self._process_entry
        )

    async def _process_entry(self, entry: feedparser.FeedParserDict) -> Pattern:
        summary = entry.get("summary", "")
        content_blocks = entry.get("content") or []
        content = content_blocks[0].get("value", "") if content_blocks else summary
        url = entry.get("link", "")
        title = entry.get("title", "")

        if self.config.fetch_full_article and url:
            content = await self._article_content(url, content)

        text = f"{title} {content}"
        has_code = has_code_content(content)
        return Pattern(
            id=f"{self.source_id}-{entry.get('id') or url}",
            title=title,
            url=url,
            publish_date=entry.get("published") or entry.get("updated", ""),
            excerpt=html_to_text(summary)[:EXCERPT_LENGTH],
            content=content,
            topics=detect_topics(text, self.config.topic_keywords),
            relevance_score=calculate_relevance(
                text, has_code, self.config.quality_signals
            ),
            has_code=has_code,
            source_id=self.source_id,
        )

    async def _article_content(self, url: str, fallback: str) -> str:
        if self._article_cache is None:
            return fallback

        async def _fetch_article() -> str:
            html = await self._http.fetch_text(url)
            return extract_article_text(html, self.config.article_selectors)

        try:
            content = await self._article_cache.get_or_fetch(
                url, _fetch_article, self.config.article_ttl
            )
        except SourceFetchError as e:
            logger.debug("Article fetch failed, using feed content: %s", e)
            return fallback
        return content or fallback
