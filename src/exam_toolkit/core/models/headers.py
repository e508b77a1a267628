"""
Module: headers

Purpose:
    Provides the DetectedHeader dataclass - a question/answer header found
    on one page by either the text path or the OCR path. Both detector
    implementations produce this same record so the slicer never needs to
    know which path found a header.

Key Classes:
    - HeaderSource: Which detector produced the header
    - DetectedHeader: Header number, position, confidence and source

Used By:
    - segmenter.detection: Produces headers
    - segmenter.slicing.bounds_calculator: Consumes sorted headers
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class HeaderSource(str, Enum):
    """Detector that produced a header."""

    TEXT = "TEXT"
    OCR = "OCR"


@dataclass(frozen=True, slots=True)
class DetectedHeader:
    """
    A header candidate on one page.

    Attributes:
        question_number: Main question number (sub-parts roll into it)
        y_position: Top-down pixel y at the reference scale
        x_position: Left pixel x at the reference scale
        confidence: Score in [0, 1] used for deduplication
        source: HeaderSource.TEXT or HeaderSource.OCR
        text: The line text that matched (diagnostic only)

    Invariants:
        - question_number >= 1
        - 0 <= confidence <= 1

    Example:
        >>> h = DetectedHeader(question_number=3, y_position=412.0, x_position=90.0, confidence=0.85)
        >>> h.source
        <HeaderSource.TEXT: 'TEXT'>
    """

    question_number: int
    y_position: float
    x_position: float = 0.0
    confidence: float = 0.5
    source: HeaderSource = HeaderSource.TEXT
    text: str = ""

    def __post_init__(self) -> None:
        if self.question_number < 1:
            raise ValueError(f"question_number must be positive: {self.question_number}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1]: {self.confidence}")
