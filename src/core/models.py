# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; sources, ranking, caches and handlers all
import them from core.models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# === HTTP REVALIDATION ===


class HttpMeta(BaseModel):
    """Validators returned by an upstream server, replayed on revalidation."""

    etag: str | None = None
    last_modified: str | None = None

    def is_empty(self) -> bool:
        return not self.etag and not self.last_modified


# === RANKABLE CANDIDATES ===


class Candidate(BaseModel):
    """Anything the ranking engine can score: an id, a base score, and text."""

    id: str
    relevance_score: int = Field(default=0, ge=0, le=100)

    def haystack(self) -> str:
        """Text the overlap scorer searches for query tokens."""
        return self.id

    def with_score(self, relevance_score: int) -> Candidate:
        """Return a copy carrying a new relevance score."""
        return self.model_copy(update={"relevance_score": relevance_score})


class Pattern(Candidate):
    """A single article or post produced by a content source."""

    title: str = ""
    url: str = ""
    publish_date: str = ""
    excerpt: str = ""
    content: str = ""
    topics: list[str] = Field(default_factory=list)
    has_code: bool = False
    source_id: str = ""

    def haystack(self) -> str:
        return " ".join(
            [self.title, self.excerpt, self.content, " ".join(self.topics)]
        )

    @property
    def source_label(self) -> str:
        """Source id, falling back to the id prefix for legacy entries."""
        return self.source_id or self.id.split("-", 1)[0]
