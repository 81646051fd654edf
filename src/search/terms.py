# src/search/terms.py — v1
"""Shared token normalization for ranking and intent-cache keys.

- Lowercase, strip punctuation except hyphens
- Split hyphenated compounds unless the whole compound is preserved
- Drop stopwords and single-character tokens
- Keep preserved domain terms as-is (never transformed)
"""

from __future__ import annotations

import re
from typing import Callable

STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "this", "that", "these",
    "those", "it", "its", "they", "them", "their", "we", "our", "you", "your",
    "i", "my", "me", "he", "she", "him", "her", "his", "who", "what", "which",
    "when", "where", "why", "how", "all", "each", "every", "both", "few",
    "more", "most", "other", "some", "such", "no", "not", "only", "same",
    "so", "than", "too", "very", "just", "also", "now", "here", "there",
})

# Swift terms kept verbatim. Hyphenated entries are matched before splitting.
PRESERVE_TERMS: frozenset[str] = frozenset({
    "swift", "swiftui", "uikit", "combine", "async", "await", "actor",
    "struct", "class", "enum", "protocol", "extension", "func", "var", "let",
    "mvvm", "viper", "mvc", "tca", "xctest", "xcode", "ios", "macos",
    "watchos", "tvos", "ipados", "appkit", "foundation", "coredata",
    "cloudkit", "urlsession", "codable", "observable", "published",
    "stateobject", "observedobject", "environmentobject", "binding", "state",
    "objective-c",
})

_NON_WORD = re.compile(r"[^\w\s-]")


def normalize_tokens(
    text: str,
    transform: Callable[[str], str] | None = None,
) -> list[str]:
    """Tokenize ``text`` into normalized search terms.

    Args:
        text: Raw text or query.
        transform: Optional function (e.g. a stemmer) applied to tokens
            that are not preserved terms.

    Returns:
        Tokens in their original order, duplicates kept.
    """
    raw_tokens = _NON_WORD.sub(" ", text.lower()).split()

    tokens: list[str] = []
    for raw in raw_tokens:
        if raw in PRESERVE_TERMS:
            tokens.append(raw)
            continue

        for sub in raw.split("-"):
            if len(sub) <= 1 or sub in STOPWORDS:
                continue
            if sub in PRESERVE_TERMS or transform is None:
                tokens.append(sub)
            else:
                tokens.append(transform(sub))

    return tokens
