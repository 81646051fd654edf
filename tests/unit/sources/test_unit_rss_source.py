# tests/unit/sources/test_unit_rss_source.py — v1
"""Tests for sources/rss_source.py — feed parsing, search and article enrichment."""

from __future__ import annotations

import asyncio
import warnings

import httpx
import pytest

from swiftpatterns.api.handlers import prepare_results
from swiftpatterns.search.overlap import apply_overlap_boost, compute_query_overlap
from swiftpatterns.search.query_profile import build_query_profile
from swiftpatterns.sources.analysis import BASE_QUALITY_SIGNALS, BASE_TOPIC_KEYWORDS
from swiftpatterns.sources.http import HttpClient, HttpStatusError, SourceFetchError
from swiftpatterns.sources.rss_source import FeedConfig, RssPatternSource

FEED_URL = "https://blog.example.com/feed.xml"
ASYNC_URL = "https://blog.example.com/async-await"

ATOM_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Blog</title>
  <id>https://blog.example.com/</id>
  <updated>2024-03-01T10:00:00Z</updated>
  <entry>
    <title>Actors in Swift</title>
    <link href="https://blog.example.com/actors"/>
    <id>https://blog.example.com/actors</id>
    <updated>2024-03-01T10:00:00Z</updated>
    <summary>Protecting mutable state with actors.</summary>
  </entry>
</feed>
"""


def _config(**kw) -> FeedConfig:
    return FeedConfig(
        source_id="blog",
        display_name="Example Blog",
        feed_url=FEED_URL,
        topic_keywords=BASE_TOPIC_KEYWORDS,
        quality_signals=BASE_QUALITY_SIGNALS,
        **kw,
    )


def _source(handler, make_cache, config: FeedConfig | None = None) -> RssPatternSource:
    http = HttpClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    return RssPatternSource(
        config=config or _config(),
        http=http,
        feed_cache=make_cache("rss"),
        article_cache=make_cache("articles"),
        fetch_concurrency=2,
    )


class TestFeedConfig:
    def test_cache_key(self):
        assert _config().cache_key == "blog-patterns"

    def test_defaults(self):
        config = _config()
        assert config.feed_ttl == 3600
        assert config.article_ttl == 86400
        assert config.fetch_full_article is False


class TestFetchAll:

    @pytest.mark.asyncio
    async def test_parses_items(self, make_cache, sample_feed):
        source = _source(lambda r: httpx.Response(200, text=sample_feed), make_cache)
        patterns = await source.fetch_all()

        assert [p.title for p in patterns] == ["Async await in Swift", "SwiftUI navigation stack"]
        first, second = patterns
        assert first.id == f"blog-{ASYNC_URL}"
        assert first.url == ASYNC_URL
        assert first.source_id == "blog"
        assert first.has_code is True
        assert "concurrency" in first.topics
        assert first.excerpt == "Learn how to use async await with actors."
        assert second.has_code is False
        assert second.content == "A tutorial on SwiftUI navigation and state."
        assert 0 <= second.relevance_score <= 100

    @pytest.mark.asyncio
    async def test_cached_after_first_fetch(self, make_cache, sample_feed):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, text=sample_feed)

        source = _source(handler, make_cache)
        first = await source.fetch_all()
        second = await source.fetch_all()
        assert calls == 1
        assert first == second

    @pytest.mark.asyncio
    async def test_concurrent_calls_coalesce(self, make_cache, sample_feed):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, text=sample_feed)

        source = _source(handler, make_cache)
        results = await asyncio.gather(*(source.fetch_all() for _ in range(5)))
        assert calls == 1
        assert all(r == results[0] for r in results)

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, make_cache):
        source = _source(lambda r: httpx.Response(500), make_cache)
        with pytest.raises(HttpStatusError):
            await source.fetch_all()

    @pytest.mark.asyncio
    async def test_unparseable_feed_raises(self, make_cache):
        source = _source(lambda r: httpx.Response(200, text="definitely not a feed"), make_cache)
        with pytest.raises(SourceFetchError, match="unparseable"):
            await source.fetch_all()

    @pytest.mark.asyncio
    async def test_publish_date_prefers_published(self, make_cache, sample_feed):
        source = _source(lambda r: httpx.Response(200, text=sample_feed), make_cache)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            patterns = await source.fetch_all()
        assert not [w for w in caught if "`updated`" in str(w.message)]
        assert patterns[0].publish_date == "Mon, 01 Jan 2024 10:00:00 GMT"

    @pytest.mark.asyncio
    async def test_publish_date_falls_back_to_updated(self, make_cache):
        source = _source(lambda r: httpx.Response(200, text=ATOM_FEED), make_cache)
        patterns = await source.fetch_all()
        assert patterns[0].publish_date == "2024-03-01T10:00:00Z"


class TestSearch:

    @pytest.mark.asyncio
    async def test_keeps_matching_items_unboosted(self, make_cache, sample_feed):
        source = _source(lambda r: httpx.Response(200, text=sample_feed), make_cache)
        everything = {p.id: p for p in await source.fetch_all()}
        results = await source.search("async await")

        assert [p.title for p in results] == ["Async await in Swift"]
        assert results[0].relevance_score == everything[results[0].id].relevance_score

    @pytest.mark.asyncio
    async def test_ranked_score_boosted_once(self, make_cache, sample_feed):
        source = _source(lambda r: httpx.Response(200, text=sample_feed), make_cache)
        base = {p.id: p for p in await source.fetch_all()}
        profile = build_query_profile("async await")

        ranked = prepare_results(await source.search("async await"), "async await")

        assert ranked
        for pattern in ranked:
            original = base[pattern.id]
            overlap = compute_query_overlap(original.haystack(), profile)
            assert pattern.relevance_score == apply_overlap_boost(
                original.relevance_score, overlap.score
            )

    @pytest.mark.asyncio
    async def test_best_overlap_first(self, make_cache, sample_feed):
        source = _source(lambda r: httpx.Response(200, text=sample_feed), make_cache)
        results = await source.search("swiftui navigation")
        assert results[0].title == "SwiftUI navigation stack"

    @pytest.mark.asyncio
    async def test_tokenless_query_returns_all(self, make_cache, sample_feed):
        source = _source(lambda r: httpx.Response(200, text=sample_feed), make_cache)
        assert len(await source.search("the")) == 2


class TestArticleEnrichment:

    @pytest.mark.asyncio
    async def test_full_article_used(self, make_cache, sample_feed):
        article_calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == FEED_URL:
                return httpx.Response(200, text=sample_feed)
            article_calls.append(str(request.url))
            return httpx.Response(
                200,
                text="<html><body><div class='post-content'><p>Full body text</p></div></body></html>",
            )

        source = _source(
            handler, make_cache,
            _config(fetch_full_article=True, article_selectors=(".post-content",)),
        )
        patterns = await source.fetch_all()
        assert all(p.content == "Full body text" for p in patterns)
        assert sorted(article_calls) == sorted(p.url for p in patterns)

    @pytest.mark.asyncio
    async def test_article_failure_falls_back_per_item(self, make_cache, sample_feed):
        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            if url == FEED_URL:
                return httpx.Response(200, text=sample_feed)
            if url == ASYNC_URL:
                return httpx.Response(500)
            return httpx.Response(200, text="<article><p>Fetched page</p></article>")

        source = _source(handler, make_cache, _config(fetch_full_article=True))
        first, second = await source.fetch_all()
        assert "func load()" in first.content
        assert first.has_code is True
        assert second.content == "Fetched page"
