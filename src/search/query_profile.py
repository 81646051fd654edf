# src/search/query_profile.py — v1
"""Query profiler: raw query string -> weighted token profile.

The profile carries a short list of compiled query variants (original,
all tokens by weight, top-3, top-5) for upstream search calls, and the
weighted tokens used by the overlap scorer.

Weight per canonical token:
    repeat_count * 2 + position_boost + specificity_boost
where position_boost = 1 - first_index / n rewards early tokens and
specificity_boost = min(len, 12) / 12 rewards longer tokens.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from swiftpatterns.search.terms import normalize_tokens

MAX_QUERY_VARIANTS = 4
DEFAULT_QUERY = "swiftui"
SPECIFICITY_CAP = 12

_WHITESPACE = re.compile(r"\s+")


class WeightedToken(BaseModel):
    token: str
    weight: float


class QueryProfile(BaseModel):
    """Canonical weighted view of a query."""

    compiled_queries: list[str] = Field(default_factory=list)
    weighted_tokens: list[WeightedToken] = Field(default_factory=list)

    @property
    def tokens(self) -> list[str]:
        return [t.token for t in self.weighted_tokens]


def canonicalize_token(token: str) -> str:
    """Light suffix stripping: ``-ing`` (len > 5), else plural ``-s`` (len > 4).

    A heuristic, not a stemmer: "glass" becomes "glas". Kept crude so
    ranking stays reproducible.
    """
    if token.endswith("ing") and len(token) > 5:
        return token[:-3]
    if token.endswith("s") and len(token) > 4:
        return token[:-1]
    return token


def build_query_profile(query: str) -> QueryProfile:
    """Build the weighted token profile and compiled variants for ``query``."""
    original = query.strip()
    variants: list[str] = []
    seen: set[str] = set()

    def _push(candidate: str) -> None:
        normalized = _WHITESPACE.sub(" ", candidate.strip())
        if not normalized:
            return
        key = normalized.lower()
        if key in seen:
            return
        seen.add(key)
        variants.append(normalized)

    if original:
        _push(original)

    tokens = [canonicalize_token(t) for t in normalize_tokens(original)]

    counts: dict[str, int] = {}
    first_index: dict[str, int] = {}
    for i, token in enumerate(tokens):
        if token not in counts:
            counts[token] = 0
            first_index[token] = i
        counts[token] += 1

    total = max(len(tokens), 1)
    weighted = [
        WeightedToken(
            token=token,
            weight=round(
                count * 2
                + (1 - first_index[token] / total)
                + min(len(token), SPECIFICITY_CAP) / SPECIFICITY_CAP,
                3,
            ),
        )
        for token, count in counts.items()
    ]
    # sorted() is stable: equal weights keep first-appearance order.
    weighted = sorted(weighted, key=lambda t: t.weight, reverse=True)

    if weighted:
        ordered = [t.token for t in weighted]
        _push(" ".join(ordered))
        _push(" ".join(ordered[:3]))
        _push(" ".join(ordered[:5]))

    if not variants:
        _push(DEFAULT_QUERY)

    return QueryProfile(
        compiled_queries=variants[:MAX_QUERY_VARIANTS],
        weighted_tokens=weighted,
    )
