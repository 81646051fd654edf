# src/api/models.py — v1
"""API-level models returned to callers of the tool handlers."""

from __future__ import annotations

from pydantic import BaseModel, Field

from swiftpatterns.core.models import Pattern


class ToolResponse(BaseModel):
    """Text payload handed back to the calling agent."""

    text: str
    is_error: bool = False

    @classmethod
    def error(cls, message: str) -> ToolResponse:
        return cls(text=f"Error: {message}", is_error=True)


class CachedSearchResult(BaseModel):
    """Ranked, deduplicated results plus whether they came from cache."""

    results: list[Pattern] = Field(default_factory=list)
    was_cache_hit: bool = False


class SourceInfo(BaseModel):
    """One row of the content-source listing."""

    source_id: str
    name: str
    description: str = ""
    enabled: bool = False
