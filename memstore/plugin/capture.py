"""
Auto-capture heuristic for the agent plugin.

A CapturePolicy is an ordered list of case-insensitive regular
expressions; text is captured when any of them matches. The defaults
target first-person factual statements ("I prefer...", "we use...",
"remember that...") and are a coarse filter with no precision guarantee.
"""

import re
from collections.abc import Iterable

DEFAULT_CAPTURE_PATTERNS: tuple[str, ...] = (
    r"\bI (?:prefer|like|use|want|need|always|never|hate)\b",
    r"\bI (?:work|worked|am working) (?:at|on|for|with)\b",
    r"\bI(?:'m| am) (?:a |an )?(?:\w+ )*(?:developer|engineer|designer|manager|student)\b",
    r"\bI decided\b",
    r"\bmy [\w\s]+ (?:is|are)\b",
    r"\bremember (?:that|this)\b",
    r"\bdon'?t forget\b",
    r"\bour (?:stack|tech|project|team|company|org)\b",
    r"\bwe (?:use|chose|picked|switched to|migrated to)\b",
)


class CapturePolicy:
    """
    Ordered set of capture predicates with "any match" semantics.

    Usage:
        policy = CapturePolicy()
        policy.should_capture("We use Postgres for everything")  # True
        policy.add_pattern(r"\\bnote to self\\b")
    """

    def __init__(self, patterns: Iterable[str | re.Pattern[str]] | None = None):
        source = DEFAULT_CAPTURE_PATTERNS if patterns is None else patterns
        self._patterns: list[re.Pattern[str]] = [self._compile(p) for p in source]

    @staticmethod
    def _compile(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
        if isinstance(pattern, re.Pattern):
            return pattern
        return re.compile(pattern, re.IGNORECASE)

    @property
    def patterns(self) -> list[re.Pattern[str]]:
        return list(self._patterns)

    def add_pattern(self, pattern: str | re.Pattern[str]) -> None:
        """Append a pattern; evaluated after the existing ones."""
        self._patterns.append(self._compile(pattern))

    def matching_pattern(self, text: str) -> re.Pattern[str] | None:
        """Return the first pattern that matches, if any."""
        if not text:
            return None
        for pattern in self._patterns:
            if pattern.search(text):
                return pattern
        return None

    def should_capture(self, text: str) -> bool:
        return self.matching_pattern(text) is not None
