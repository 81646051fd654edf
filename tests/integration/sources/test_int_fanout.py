# tests/integration/sources/test_int_fanout.py — v1
"""Integration tests for fan-out over several sources with partial failure.

Covers: sources/fanout.py, api/facade.py, api/handlers.py.
"""

from __future__ import annotations

import asyncio

import pytest

from swiftpatterns.api.facade import PatternService
from swiftpatterns.sources.fanout import FanoutCoordinator
from swiftpatterns.sources.http import HttpStatusError


@pytest.fixture
def four_sources(source_factory, pattern_factory):
    return {
        "alpha": source_factory("alpha", [pattern_factory("alpha-1", "Swift x macros", source_id="alpha")]),
        "beta": source_factory("beta", [pattern_factory("beta-1", "Result builders x", source_id="beta")]),
        "gamma": source_factory("gamma", error=HttpStatusError("https://gamma.example.com/feed", 503)),
        "delta": source_factory("delta", [pattern_factory("delta-1", "x in SwiftUI", source_id="delta")]),
    }


class TestPartialFailure:

    @pytest.mark.asyncio
    async def test_failing_source_does_not_abort_siblings(self, four_sources):
        fanout = FanoutCoordinator(four_sources)
        results = await fanout.search_all("x")
        assert [p.id for p in results] == ["alpha-1", "beta-1", "delta-1"]
        assert all(s.search_calls == 1 for s in four_sources.values())

    @pytest.mark.asyncio
    async def test_all_failing_yields_empty(self, source_factory):
        fanout = FanoutCoordinator({
            "a": source_factory("a", error=RuntimeError("down")),
            "b": source_factory("b", error=RuntimeError("down")),
        })
        assert await fanout.fetch_all() == []

    @pytest.mark.asyncio
    async def test_concurrent_fanouts_coalesce(self, source_factory, pattern_factory):
        gate = asyncio.Event()
        source = source_factory("alpha", [pattern_factory("alpha-1", "x", source_id="alpha")], gate=gate)
        fanout = FanoutCoordinator({"alpha": source})

        calls = [asyncio.ensure_future(fanout.search_all("x")) for _ in range(5)]
        await asyncio.sleep(0.05)
        gate.set()
        results = await asyncio.gather(*calls)

        assert source.search_calls == 1
        assert all(r == results[0] for r in results)

    @pytest.mark.asyncio
    async def test_service_search_survives_failing_source(self, settings, four_sources):
        async with PatternService(settings, sources=four_sources) as service:
            response = await service.search("x")
        assert response.is_error is False
        assert "Found 3 result(s)" in response.text
