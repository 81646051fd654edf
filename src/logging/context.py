# src/logging/context.py — v1
"""Contextual logging support: attach tool, query and source to log records.

Context variables are task-local under asyncio, so concurrent tool calls
each see their own values.
"""

from __future__ import annotations

import contextlib
import contextvars
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

_tool: contextvars.ContextVar[str | None] = contextvars.ContextVar("tool", default=None)
_query: contextvars.ContextVar[str | None] = contextvars.ContextVar("query", default=None)
_source: contextvars.ContextVar[str | None] = contextvars.ContextVar("source", default=None)

_VARS = {"tool": _tool, "query": _query, "source": _source}


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    tool: str | None = None
    query: str | None = None
    source: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(tool=_tool.get(), query=_query.get(), source=_source.get())


@contextlib.contextmanager
def log_context(**values: str | None) -> Iterator[LogContext]:
    """Temporarily bind context fields, restoring previous values on exit.

    Raises:
        KeyError: For a field other than tool, query or source.
    """
    tokens = [(_VARS[name], _VARS[name].set(value)) for name, value in values.items()]
    try:
        yield get_context()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
