# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides sample patterns, controllable fake sources, a fake clock, temp
cache directories and a sample RSS feed. No network access: HTTP is faked
with httpx.MockTransport where needed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from swiftpatterns.cache.json_store import JsonCacheStore
from swiftpatterns.cache.tiered_cache import TieredCache
from swiftpatterns.config.settings import Settings
from swiftpatterns.core.models import Pattern
from swiftpatterns.sources.base_source import BasePatternSource


# === HELPERS ===


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource(BasePatternSource):
    """In-memory source counting its invocations.

    ``gate`` (if given) blocks every call until set; ``error`` makes every
    call raise.
    """

    def __init__(
        self,
        source_id: str,
        patterns: list[Pattern] | None = None,
        gate: asyncio.Event | None = None,
        error: Exception | None = None,
    ) -> None:
        self.source_id = source_id
        self.display_name = source_id.title()
        self.patterns = patterns or []
        self.gate = gate
        self.error = error
        self.fetch_calls = 0
        self.search_calls = 0

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def fetch_all(self) -> list[Pattern]:
        self.fetch_calls += 1
        await self._wait()
        return list(self.patterns)

    async def search(self, query: str) -> list[Pattern]:
        self.search_calls += 1
        await self._wait()
        terms = query.lower().split()
        return [
            p for p in self.patterns
            if any(t in p.haystack().lower() for t in terms)
        ]


def make_pattern(
    pid: str,
    title: str,
    score: int = 70,
    has_code: bool = False,
    source_id: str | None = None,
    excerpt: str | None = None,
    topics: list[str] | None = None,
) -> Pattern:
    return Pattern(
        id=pid,
        title=title,
        url=f"https://example.com/{pid}",
        publish_date="2024-01-01",
        excerpt=excerpt if excerpt is not None else f"{title} explained.",
        content=f"<p>{title}</p>",
        topics=topics or [],
        relevance_score=score,
        has_code=has_code,
        source_id=source_id or pid.split("-", 1)[0],
    )


SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Sample Swift Blog</title>
    <link>https://blog.example.com</link>
    <description>Swift articles</description>
    <item>
      <title>Async await in Swift</title>
      <link>https://blog.example.com/async-await</link>
      <guid>https://blog.example.com/async-await</guid>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <description>Learn how to use async await with actors.</description>
      <content:encoded><![CDATA[<p>Use async await.</p><pre><code>func load() async throws -> Data { try await fetch() }</code></pre>]]></content:encoded>
    </item>
    <item>
      <title>SwiftUI navigation stack</title>
      <link>https://blog.example.com/navigation</link>
      <guid>https://blog.example.com/navigation</guid>
      <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
      <description>A tutorial on SwiftUI navigation and state.</description>
    </item>
  </channel>
</rss>
"""


# === FIXTURES ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def make_cache(cache_dir: Path, clock: FakeClock):
    """Factory for TieredCache instances sharing one temp root and clock."""

    def _make(namespace: str = "test", max_memory_entries: int = 500, ttl: float = 86400):
        return TieredCache(
            namespace=namespace,
            store=JsonCacheStore(cache_dir / namespace),
            max_memory_entries=max_memory_entries,
            default_ttl=ttl,
            clock=clock,
        )

    return _make


@pytest.fixture
def settings(cache_dir: Path) -> Settings:
    """Settings isolated from any local .env."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        cache_root=cache_dir,
        cache_sweep_interval=0,
    )


@pytest.fixture
def sample_patterns() -> list[Pattern]:
    return [
        make_pattern("sundell-async", "Async await in Swift", 80, has_code=True),
        make_pattern("sundell-navigation", "SwiftUI navigation stack", 65),
        make_pattern("vanderlee-actors", "Actors and async await", 75, has_code=True),
        make_pattern("vanderlee-xcode", "Xcode debugging tips", 55),
    ]


@pytest.fixture
def sample_feed() -> str:
    return SAMPLE_FEED


@pytest.fixture
def pattern_factory():
    return make_pattern


@pytest.fixture
def source_factory():
    return FakeSource
