"""Header text patterns shared by the text and OCR detectors.

Matching is tried in priority order: explicit keyword headers, dotted
sub-numbering, then bare numeric headers. Only the main question number is
returned; sub-part numbers are discarded so sub-questions roll into their
parent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = [
    "HeaderKind",
    "HeaderMatch",
    "match_header_number",
    "contains_header_keyword",
]


def _letter_spaced(word: str) -> str:
    # "QUESTION" -> "Q\s?U\s?E..." so "Q U E S T I O N" also matches
    return r"\s?".join(word)


_KEYWORDS = ("QUESTION", "SOLUTION", "ANSWER")

KEYWORD_RE = re.compile(
    r"^(?:" + "|".join(_letter_spaced(k) for k in _KEYWORDS) + r"|Q)"
    r"\s*[.:)\-]*\s*(\d{1,3})(?!\d)",
    re.IGNORECASE,
)
DOTTED_RE = re.compile(r"^(\d{1,3})\.(\d{1,3})(?:\.\d{1,3})?(?!\d)")
NUMERIC_RE = re.compile(r"^\(?(\d{1,3})\)?\s*[.)\-:]\s+")
KEYWORD_ANYWHERE_RE = re.compile(r"\b(?:Question|Answer|Solution)\b|\bQ\b", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


class HeaderKind(str, Enum):
    """Which rule matched a header line."""

    KEYWORD = "keyword"
    DOTTED = "dotted"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class HeaderMatch:
    number: int
    kind: HeaderKind

    @property
    def is_keyword(self) -> bool:
        return self.kind is HeaderKind.KEYWORD


def match_header_number(text: str) -> Optional[HeaderMatch]:
    """
    Extract the main question number from a candidate header line.

    Args:
        text: Line text (whitespace is normalised here).

    Returns:
        HeaderMatch, or None when no rule matches or the number is 0.

    Example:
        >>> match_header_number("Q U E S T I O N 4")
        HeaderMatch(number=4, kind=<HeaderKind.KEYWORD: 'keyword'>)
        >>> match_header_number("2.3 Explain why").number
        2
        >>> match_header_number("(10)") is None
        True
    """
    t = _WHITESPACE_RE.sub(" ", text).strip()
    for regex, kind in (
        (KEYWORD_RE, HeaderKind.KEYWORD),
        (DOTTED_RE, HeaderKind.DOTTED),
        (NUMERIC_RE, HeaderKind.NUMERIC),
    ):
        m = regex.match(t)
        if m:
            number = int(m.group(1))
            return HeaderMatch(number, kind) if number > 0 else None
    return None


def contains_header_keyword(text: str) -> bool:
    """True if Question/Answer/Solution or a standalone Q appears anywhere."""
    return bool(KEYWORD_ANYWHERE_RE.search(text))
