# src/search/overlap.py — v1
"""Overlap scoring and query-aware ranking of candidates.

A candidate's overlap is the summed weight of profile tokens found as
substrings of its lowercased text. A match is "strong" when it clears a
profile-relative bar, so a long specific query cannot be satisfied by its
single most generic term.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from swiftpatterns.core.models import Candidate
from swiftpatterns.search.query_profile import QueryProfile

QUERY_OVERLAP_SCORE_CAP = 8
QUERY_OVERLAP_RELEVANCE_MULTIPLIER = 1.5
STRONG_OVERLAP_RATIO = 0.35
STRONG_OVERLAP_TOP_TOKENS = 4
SHORT_QUERY_TOKENS = 2

C = TypeVar("C", bound=Candidate)


@dataclass(frozen=True)
class QueryOverlap:
    score: float
    matched_tokens: int


@dataclass(frozen=True)
class ScoredCandidate(Generic[C]):
    candidate: C
    overlap: QueryOverlap


def compute_query_overlap(text: str, profile: QueryProfile) -> QueryOverlap:
    """Sum the weights of profile tokens that occur in ``text``."""
    if not profile.weighted_tokens:
        return QueryOverlap(score=0.0, matched_tokens=0)

    haystack = text.lower()
    score = 0.0
    matched = 0
    for wt in profile.weighted_tokens:
        if wt.token in haystack:
            score += wt.weight
            matched += 1
    return QueryOverlap(score=score, matched_tokens=matched)


def is_strong_query_overlap(overlap: QueryOverlap, profile: QueryProfile) -> bool:
    """Classify an overlap as a genuine match for ``profile``.

    Up to two tokens: any match counts. Longer queries need at least two
    matched tokens and 35% of the summed weight of the top four tokens.
    """
    token_count = len(profile.weighted_tokens)
    if token_count == 0:
        return False
    if token_count <= SHORT_QUERY_TOKENS:
        return overlap.matched_tokens >= 1

    top_weights = sum(
        wt.weight for wt in profile.weighted_tokens[:STRONG_OVERLAP_TOP_TOKENS]
    )
    return (
        overlap.matched_tokens >= 2
        and overlap.score >= top_weights * STRONG_OVERLAP_RATIO
    )


def compare_by_overlap_then_score(a: ScoredCandidate, b: ScoredCandidate) -> int:
    """Comparator: overlap score descending, then base relevance descending."""
    if a.overlap.score != b.overlap.score:
        return -1 if a.overlap.score > b.overlap.score else 1
    return b.candidate.relevance_score - a.candidate.relevance_score


def apply_overlap_boost(base_score: int, overlap_score: float) -> int:
    """Raise ``base_score`` by the capped overlap, clamped to 100."""
    boost = round(
        min(overlap_score, QUERY_OVERLAP_SCORE_CAP) * QUERY_OVERLAP_RELEVANCE_MULTIPLIER
    )
    return min(100, base_score + boost)


def score_candidates(
    candidates: list[C],
    profile: QueryProfile,
    to_haystack: Callable[[C], str] | None = None,
    boost: bool = True,
) -> list[ScoredCandidate[C]]:
    """Score each candidate against ``profile``.

    With ``boost`` the returned candidates carry the overlap-boosted
    relevance; without it they are returned untouched.
    """
    haystack = to_haystack or (lambda c: c.haystack())
    scored: list[ScoredCandidate[C]] = []
    for candidate in candidates:
        overlap = compute_query_overlap(haystack(candidate), profile)
        if boost:
            candidate = candidate.with_score(
                apply_overlap_boost(candidate.relevance_score, overlap.score)
            )
        scored.append(ScoredCandidate(candidate=candidate, overlap=overlap))  # type: ignore[arg-type]
    return scored


def rank_for_query(
    candidates: list[C],
    profile: QueryProfile,
    to_haystack: Callable[[C], str] | None = None,
    fallback_to_original: bool = False,
) -> list[C]:
    """Keep strongly-overlapping candidates, best first.

    Returns the input unchanged when the profile has no tokens or there
    is nothing to rank. When no candidate is strong, returns the original
    list if ``fallback_to_original`` is set, otherwise an empty list.
    """
    if not profile.weighted_tokens or not candidates:
        return candidates

    strong = [
        sc for sc in score_candidates(candidates, profile, to_haystack)
        if is_strong_query_overlap(sc.overlap, profile)
    ]
    strong.sort(key=functools.cmp_to_key(compare_by_overlap_then_score))

    if not strong and fallback_to_original:
        return candidates
    return [sc.candidate for sc in strong]
