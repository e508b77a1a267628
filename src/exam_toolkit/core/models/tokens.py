"""
Module: tokens

Purpose:
    Positioned text primitives produced by a page's text layer. A
    PositionedTextToken is one text run in PDF space; a TextLine is the
    reading-order grouping of tokens that share a baseline.

Key Classes:
    - PositionedTextToken: Immutable text run with position and font height
    - TextLine: Tokens on one visual line plus derived text/geometry

Dependencies:
    - dataclasses (std)
    - numbers (std)

Used By:
    - segmenter.source: Emits tokens per page
    - segmenter.layout: Groups tokens into lines
    - segmenter.detection.text_headers: Classifies lines as headers

Coordinate Space:
    Tokens are in page coordinate space with origin bottom-left and y
    increasing upward. TextLine.top_y is already converted to top-down
    canvas pixels at the rendering scale.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Sequence, Tuple


def _number_or_zero(value: Any) -> float:
    # bool is a Real subclass but never a coordinate
    if isinstance(value, Real) and not isinstance(value, bool):
        return float(value)
    return 0.0


@dataclass(frozen=True, slots=True)
class PositionedTextToken:
    """
    One text run on a page.

    Attributes:
        text: Raw text of the run (may contain whitespace)
        x: Left x-coordinate in PDF space
        y: Baseline y-coordinate in PDF space (bottom-up)
        font_height: Font height in PDF units (always >= 0)

    Example:
        >>> tok = PositionedTextToken.from_transform("Question 1", [12, 0, 0, 12, 56, 700])
        >>> (tok.x, tok.y, tok.font_height)
        (56.0, 700.0, 12.0)
    """

    text: str
    x: float = 0.0
    y: float = 0.0
    font_height: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError(f"token text must be str: {type(self.text).__name__}")
        if self.font_height < 0:
            raise ValueError(f"font_height must be >= 0: {self.font_height}")

    @classmethod
    def from_transform(cls, text: Any, transform: Sequence[Any] | None) -> PositionedTextToken:
        """
        Build a token from a six-element text matrix ``[a, b, c, d, e, f]``.

        Font height is ``|d|``, x is ``e`` and y is ``f``. Missing or
        malformed entries become 0 rather than raising, so a page with odd
        text-layer data degrades instead of failing.
        """
        values = list(transform) if isinstance(transform, (list, tuple)) else []
        values += [None] * (6 - len(values))
        return cls(
            text=text if isinstance(text, str) else "",
            x=_number_or_zero(values[4]),
            y=_number_or_zero(values[5]),
            font_height=abs(_number_or_zero(values[3])),
        )


@dataclass(frozen=True, slots=True)
class TextLine:
    """
    Tokens sharing a (tolerant) baseline, sorted left to right.

    Attributes:
        tokens: Member tokens ordered by x
        text: Joined, whitespace-normalised text
        top_y: Top-down canvas y at the rendering scale
        left_x: Smallest token x (PDF space)
        max_font_height: Largest token font height (PDF units)
        pdf_y: Representative baseline y (PDF space)
    """

    tokens: Tuple[PositionedTextToken, ...]
    text: str
    top_y: float
    left_x: float
    max_font_height: float
    pdf_y: float = 0.0
