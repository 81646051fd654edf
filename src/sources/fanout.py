# src/sources/fanout.py — v1
"""Fan-out coordinator: query many sources at once, tolerate failures.

Every source is invoked concurrently; a source that raises contributes
nothing and is logged, never aborting its siblings. Identical concurrent
fan-out calls (same operation, same query, same source set) are coalesced
so N simultaneous callers hit each source once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Awaitable, Callable

from swiftpatterns.cache.dedup import InflightDeduper
from swiftpatterns.core.models import Pattern
from swiftpatterns.logging.context import log_context
from swiftpatterns.sources.base_source import BasePatternSource

logger = logging.getLogger(__name__)


class FanoutCoordinator:
    """Concurrent, failure-tolerant access to a set of sources.

    Args:
        sources: Source id -> source instance.
    """

    def __init__(self, sources: Mapping[str, BasePatternSource]) -> None:
        self._sources = dict(sources)
        self._pending: InflightDeduper[tuple[str, str, tuple[str, ...]], list[Pattern]] = (
            InflightDeduper()
        )

    @property
    def source_ids(self) -> list[str]:
        return list(self._sources)

    async def search_all(
        self, query: str, source_ids: Sequence[str] | None = None
    ) -> list[Pattern]:
        """Search every selected source; results keep per-source order."""
        selected = self._select(source_ids)
        key = ("search", query, tuple(sorted(selected)))
        return await self._pending.run(
            key, lambda: self._gather(selected, lambda s: s.search(query))
        )

    async def fetch_all(self, source_ids: Sequence[str] | None = None) -> list[Pattern]:
        """Fetch everything from every selected source."""
        selected = self._select(source_ids)
        key = ("fetch", "", tuple(sorted(selected)))
        return await self._pending.run(
            key, lambda: self._gather(selected, lambda s: s.fetch_all())
        )

    def _select(self, source_ids: Sequence[str] | None) -> list[str]:
        if source_ids is None:
            return list(self._sources)
        unknown = [s for s in source_ids if s not in self._sources]
        if unknown:
            raise ValueError(f"Unknown source ids: {', '.join(unknown)}")
        return list(dict.fromkeys(source_ids))

    async def _call_source(
        self,
        source_id: str,
        call: Callable[[BasePatternSource], Awaitable[list[Pattern]]],
    ) -> list[Pattern]:
        with log_context(source=source_id):
            return await call(self._sources[source_id])

    async def _gather(
        self,
        source_ids: list[str],
        call: Callable[[BasePatternSource], Awaitable[list[Pattern]]],
    ) -> list[Pattern]:
        outcomes = await asyncio.gather(
            *(self._call_source(sid, call) for sid in source_ids),
            return_exceptions=True,
        )

        results: list[Pattern] = []
        failed = 0
        for sid, outcome in zip(source_ids, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                failed += 1
                with log_context(source=sid):
                    logger.warning("Source %s failed: %s", sid, outcome)
                continue
            results.extend(outcome)

        logger.debug(
            "Fan-out over %d sources: %d results, %d failed",
            len(source_ids), len(results), failed,
        )
        return results
