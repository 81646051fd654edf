# src/sources/base_source.py — v1
"""Abstract content source contract.

Both operations are expected to raise on failure rather than return a
silently partial list; failure containment belongs to the fan-out layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from swiftpatterns.core.models import Pattern


class BasePatternSource(ABC):
    """A single upstream provider of patterns."""

    source_id: str = ""
    display_name: str = ""

    @abstractmethod
    async def fetch_all(self) -> list[Pattern]:
        """Return every pattern the source currently offers."""

    @abstractmethod
    async def search(self, query: str) -> list[Pattern]:
        """Return patterns matching ``query`` with an initial relevance score."""
