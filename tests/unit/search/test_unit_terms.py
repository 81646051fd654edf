# tests/unit/search/test_unit_terms.py — v1
"""Tests for search/terms.py — token normalization."""

from __future__ import annotations

from swiftpatterns.search.terms import PRESERVE_TERMS, STOPWORDS, normalize_tokens


class TestNormalizeTokens:
    def test_lowercase_and_punctuation(self):
        assert normalize_tokens("SwiftUI, Navigation!") == ["swiftui", "navigation"]

    def test_stopwords_and_short_tokens_dropped(self):
        assert normalize_tokens("how to use a b actor") == ["use", "actor"]

    def test_hyphenated_compound_split(self):
        assert normalize_tokens("property-wrapper") == ["property", "wrapper"]

    def test_preserved_compound_kept(self):
        assert normalize_tokens("Objective-C interop") == ["objective-c", "interop"]

    def test_transform_skips_preserved_terms(self):
        tokens = normalize_tokens("actors async", transform=str.upper)
        assert tokens == ["ACTORS", "async"]

    def test_duplicates_kept_in_order(self):
        assert normalize_tokens("task task group") == ["task", "task", "group"]

    def test_empty(self):
        assert normalize_tokens("   ") == []

    def test_vocabularies(self):
        assert "the" in STOPWORDS
        assert "swiftui" in PRESERVE_TERMS
