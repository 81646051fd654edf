# src/cache/fingerprint.py — v2
"""Hashing helpers shared by the cache tiers.

- File keys: stable, filesystem-safe names for namespace entries.
- Source fingerprints: short digest of the enabled-source set.
- Intent keys: fixed-length digest of a normalized query intent.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable

MAX_PLAIN_KEY_LENGTH = 100
SOURCE_FINGERPRINT_LENGTH = 12

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def file_key(key: str) -> str:
    """Map a logical cache key to a file stem.

    Long keys are content-hashed (MD5 hex), shorter keys have every
    character outside ``[A-Za-z0-9_-]`` replaced by ``_``.
    """
    if len(key) > MAX_PLAIN_KEY_LENGTH:
        return hashlib.md5(key.encode("utf-8")).hexdigest()  # noqa: S324
    return _UNSAFE_KEY_CHARS.sub("_", key)


def source_fingerprint(sources: Iterable[str]) -> str:
    """SHA-256 of the sorted, comma-joined source ids, truncated to 12 hex chars."""
    joined = ",".join(sorted(sources))
    digest = hashlib.sha256(joined.encode("utf-8")).hexdigest()
    return digest[:SOURCE_FINGERPRINT_LENGTH]


def intent_digest(
    tool: str,
    normalized_query: str,
    min_quality: int,
    fingerprint: str,
    require_code: bool = False,
) -> str:
    """SHA-256 of ``tool::query::q<min_quality>::fingerprint[::code]``."""
    parts = [tool, normalized_query, f"q{min_quality}", fingerprint]
    if require_code:
        parts.append("code")
    return hashlib.sha256("::".join(parts).encode("utf-8")).hexdigest()
