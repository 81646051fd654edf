# src/api/formatting.py — v1
"""Markdown rendering of pattern results and source listings."""

from __future__ import annotations

from dataclasses import dataclass

from swiftpatterns.api.models import SourceInfo
from swiftpatterns.core.models import Pattern


@dataclass(frozen=True)
class FormatOptions:
    max_results: int = 10
    include_quality: bool = False
    include_topics: bool = False
    include_code: bool = True
    excerpt_length: int = 200


def format_pattern(pattern: Pattern, options: FormatOptions = FormatOptions()) -> str:
    """Render one pattern as a markdown section."""
    lines = [f"## {pattern.title}", f"**Source**: {pattern.source_label}"]
    if options.include_quality:
        lines.append(f"**Quality**: {pattern.relevance_score}/100")
    if options.include_topics and pattern.topics:
        lines.append(f"**Topics**: {', '.join(pattern.topics)}")
    if options.include_code and pattern.has_code:
        lines.append("**Code**: yes")
    lines.append("")
    lines.append(f"{pattern.excerpt[: options.excerpt_length]}...")
    lines.append("")
    lines.append(f"[Read more]({pattern.url})")
    return "\n".join(lines)


def format_patterns(
    patterns: list[Pattern], title: str, options: FormatOptions = FormatOptions()
) -> str:
    """Render a result list with a header and a truncation footer."""
    shown = patterns[: options.max_results]
    parts = [f"# {title}", ""]
    if patterns:
        plural = "" if len(patterns) == 1 else "s"
        parts.extend([f"Found {len(patterns)} result{plural}:", ""])
    parts.append("\n\n---\n\n".join(format_pattern(p, options) for p in shown))
    if len(patterns) > len(shown):
        parts.extend(["", f"*Showing top {len(shown)} of {len(patterns)} results*"])
    return "\n".join(parts)


def format_topic_patterns(patterns: list[Pattern], topic: str, max_results: int = 10) -> str:
    return format_patterns(
        patterns,
        f"Swift Patterns: {topic}",
        FormatOptions(
            max_results=max_results,
            include_quality=True,
            include_topics=True,
            excerpt_length=300,
        ),
    )


def format_search_patterns(patterns: list[Pattern], query: str, max_results: int = 10) -> str:
    return format_patterns(
        patterns, f'Search Results: "{query}"', FormatOptions(max_results=max_results)
    )


def format_no_results(
    query: str,
    min_quality: int = 0,
    require_code: bool = False,
    source_names: list[str] | None = None,
) -> str:
    """Empty-result message with hints on how to broaden the request."""
    qualifier = f" with quality >= {min_quality}" if min_quality > 0 else ""
    if require_code:
        qualifier += " with code examples"
    lines = [f'No patterns found for "{query}"{qualifier}.', "", "Try:"]
    lines.append("- Broader search terms")
    if min_quality > 0:
        lines.append("- Lower min_quality")
    if require_code:
        lines.append("- Dropping the code requirement")
    lines.append("- A different topic")
    if source_names:
        lines.extend(["", f"Searched sources: {', '.join(source_names)}"])
    return "\n".join(lines)


def format_source_list(sources: list[SourceInfo]) -> str:
    """Markdown listing of known sources and whether each is enabled."""
    lines = ["# Content Sources", ""]
    for info in sources:
        mark = "✅" if info.enabled else "⬜"
        line = f"- {mark} **{info.name}** (`{info.source_id}`)"
        if info.description:
            line += f" - {info.description}"
        lines.append(line)
    lines.extend([
        "",
        "✅ Enabled | ⬜ Disabled",
        "",
        "Sources are enabled with the ENABLED_SOURCES setting (comma-separated ids).",
    ])
    return "\n".join(lines)
