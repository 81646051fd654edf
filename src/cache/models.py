# src/cache/models.py — v1
"""Cache domain models: CacheEntry, StaleEntry, IntentKey, CachedIntentResult."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from swiftpatterns.core.models import HttpMeta, Pattern


class CacheEntry(BaseModel):
    """Single cached value with its age and TTL.

    ``timestamp`` is the creation time in epoch seconds; ``ttl`` is in
    seconds. The serialized form is what lands in the namespace directory.
    """

    data: Any
    timestamp: float
    ttl: float
    http_meta: HttpMeta | None = None

    def is_expired(self, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now - self.timestamp > self.ttl


class StaleEntry(BaseModel):
    """Data plus validators of an entry, returned regardless of expiry."""

    data: Any
    http_meta: HttpMeta | None = None


class IntentKey(BaseModel):
    """Caller-supplied components identifying a cacheable result set."""

    model_config = ConfigDict(frozen=True)

    tool: str
    query: str
    min_quality: int = 0
    sources: tuple[str, ...] = ()
    require_code: bool = False


class StorableIntentResult(BaseModel):
    """What a fetcher hands to the intent cache.

    Fingerprint and timestamp are deliberately absent: the intent cache
    computes and attaches them itself.
    """

    pattern_ids: list[str] = Field(default_factory=list)
    scores: dict[str, int] = Field(default_factory=dict)
    total_count: int = 0
    patterns: list[Pattern] | None = None

    @classmethod
    def from_patterns(
        cls, patterns: list[Pattern], include_patterns: bool = True
    ) -> StorableIntentResult:
        return cls(
            pattern_ids=[p.id for p in patterns],
            scores={p.id: p.relevance_score for p in patterns},
            total_count=len(patterns),
            patterns=list(patterns) if include_patterns else None,
        )


class CachedIntentResult(StorableIntentResult):
    """Stored intent result, stamped with the source fingerprint."""

    source_fingerprint: str
    timestamp: float
