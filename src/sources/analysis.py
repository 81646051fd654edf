# src/sources/analysis.py — v1
"""Content heuristics shared by sources: topics, code detection, relevance.

All functions are pure and keyword based; they produce the initial
relevance score a source attaches to each pattern (0-100).
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

BASE_TOPIC_KEYWORDS: dict[str, list[str]] = {
    "swiftui": ["swiftui", "view", "state", "binding"],
    "concurrency": ["async", "await", "actor", "task"],
    "testing": ["test", "xctest", "mock"],
    "architecture": ["architecture", "mvvm", "coordinator"],
    "networking": ["network", "urlsession", "api", "http"],
    "performance": ["performance", "memory", "optimization"],
    "protocols": ["protocol", "generic"],
    "uikit": ["uikit", "uiview"],
}

BASE_QUALITY_SIGNALS: dict[str, int] = {
    # Instructional content
    "how to": 5, "step by step": 5, "tutorial": 5, "guide": 4,
    "example": 4, "tip": 3,
    # Advanced topics
    "architecture": 8, "testing": 7, "performance": 7, "concurrency": 7,
    "async": 6, "await": 6, "actor": 6, "protocol": 5, "generic": 5,
    # Frameworks
    "swiftui": 6, "uikit": 5, "combine": 6,
}

_DECLARATION = re.compile(r"\b(func|class|struct|protocol|extension|enum|actor)\s+\w+")
_CODE_INDICATORS = [
    re.compile(r"\blet\s+\w+\s*[=:]"),
    re.compile(r"\bvar\s+\w+\s*[=:]"),
    re.compile(r"\breturn\s+\w+"),
    re.compile(r"\bguard\s+let"),
    re.compile(r"\bif\s+let"),
    re.compile(r"\basync\s+(func|let|var|throws)"),
    re.compile(r"\bawait\s+\w+"),
    re.compile(r"\b\w+\s*\(\s*\)\s*->\s*\w+"),
    re.compile(r"@\w+\s+(struct|class|func|var)"),
]


def merge_topic_keywords(
    specific: dict[str, list[str]],
    base: dict[str, list[str]] | None = None,
) -> dict[str, list[str]]:
    """Merge keyword lists per topic, de-duplicating within a topic."""
    merged = {topic: list(words) for topic, words in (base or BASE_TOPIC_KEYWORDS).items()}
    for topic, words in specific.items():
        existing = merged.setdefault(topic, [])
        existing.extend(w for w in words if w not in existing)
    return merged


def merge_quality_signals(
    specific: dict[str, int],
    base: dict[str, int] | None = None,
) -> dict[str, int]:
    """Source-specific signal points override the base points."""
    return {**(base or BASE_QUALITY_SIGNALS), **specific}


def detect_topics(text: str, keywords: dict[str, list[str]]) -> list[str]:
    """Topics whose keywords occur in ``text``."""
    lower = text.lower()
    return [topic for topic, words in keywords.items() if any(w in lower for w in words)]


def has_code_content(content: str) -> bool:
    """Whether ``content`` looks like it contains Swift code."""
    if _DECLARATION.search(content):
        return True
    if "```" in content or "<code>" in content or "<pre>" in content:
        return True
    return any(p.search(content) for p in _CODE_INDICATORS)


def calculate_relevance(
    text: str,
    has_code: bool,
    quality_signals: dict[str, int],
    base_score: int = 50,
    code_bonus: int = 10,
) -> int:
    """Base score plus matched signal points and code bonus, capped at 100."""
    lower = text.lower()
    score = base_score
    for keyword, points in quality_signals.items():
        if keyword in lower:
            score += points
    if has_code:
        score += code_bonus
    return min(100, score)


def extract_article_text(html: str, selectors: tuple[str, ...] = ()) -> str:
    """Main text of an article page.

    Tries each CSS selector in ``selectors``, then ``<article>``, then the
    whole body. Script, style, nav and footer elements are dropped; code
    blocks are kept as ``<pre><code>`` markers so code detection still works.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "nav", "footer"]):
        tag.decompose()

    node = None
    for selector in selectors:
        node = soup.select_one(selector)
        if node is not None:
            break
    if node is None:
        node = soup.find("article") or soup.body or soup

    for pre in node.find_all("pre"):
        pre.replace_with(f" <pre><code>{pre.get_text()}</code></pre> ")

    return re.sub(r"\s+", " ", node.get_text(" ")).strip()


def html_to_text(html: str) -> str:
    """Plain-text rendering of an HTML fragment, whitespace collapsed."""
    if "<" not in html:
        return re.sub(r"\s+", " ", html).strip()
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return re.sub(r"\s+", " ", text).strip()
