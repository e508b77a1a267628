"""
Module: segmenter.detection.text_headers

Purpose:
    Text-path header detection - classifies the reading-order lines of one
    page as question/answer headers using the PDF text layer, and scores
    each accepted header for later deduplication against OCR results.

Key Functions:
    - detect_text_headers(): Lines of one page -> DetectedHeader list
    - is_header_like(): Header acceptance policy (strict or lenient)
    - score_text_header(): Confidence score for an accepted line

Dependencies:
    - segmenter.detection.patterns: Header regexes
    - common.thresholds: Confidence weights

Used By:
    - segmenter.pipeline: TEXT_DETECT step
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from exam_toolkit.common.thresholds import (
    TEXT_CONFIDENCE,
    TextConfidenceWeights,
    clamp_confidence,
)
from exam_toolkit.core.models import DetectedHeader, HeaderSource, TextLine

from ..config import HeaderConfig
from ..source import Viewport
from .patterns import HeaderMatch, contains_header_keyword, match_header_number

logger = logging.getLogger(__name__)


def _is_left_aligned(line: TextLine, viewport: Viewport, ratio: float) -> bool:
    return line.left_x <= viewport.pdf_width * ratio


def is_header_like(
    line: TextLine,
    match: HeaderMatch,
    *,
    viewport: Viewport,
    median_font: float,
    config: HeaderConfig,
) -> bool:
    """
    Decide whether a matched line really is a header.

    Strict policy: keyword headers always pass; dotted and bare numeric
    headers must sit in the left margin, use a font at least
    ``min_font_ratio`` x the page median, and be short. This keeps mark
    annotations such as "(10)" and stray page numbers out.

    Lenient policy: the line must mention Question/Answer/Solution/Q
    anywhere.
    """
    if not config.strict:
        return contains_header_keyword(line.text)
    if match.is_keyword:
        return True
    return (
        _is_left_aligned(line, viewport, config.left_margin_ratio)
        and line.max_font_height >= config.min_font_ratio * median_font
        and len(line.text) <= config.max_line_chars
    )


def score_text_header(
    line: TextLine,
    match: HeaderMatch,
    *,
    viewport: Viewport,
    median_font: float,
    config: HeaderConfig,
    weights: TextConfidenceWeights = TEXT_CONFIDENCE,
) -> float:
    """Confidence for a text-path header, clamped to [0, 1]."""
    score = weights.base
    if match.is_keyword:
        score += weights.keyword_bonus
    if line.max_font_height >= weights.large_font_ratio * median_font:
        score += weights.large_font_bonus
    if _is_left_aligned(line, viewport, config.left_margin_ratio):
        score += weights.left_aligned_bonus
    return clamp_confidence(score)


def detect_text_headers(
    lines: Sequence[TextLine],
    viewport: Viewport,
    *,
    median_font: float,
    config: HeaderConfig | None = None,
    weights: TextConfidenceWeights = TEXT_CONFIDENCE,
) -> List[DetectedHeader]:
    """
    Detect headers among the lines of one page.

    Args:
        lines: Reading-order lines whose top_y is at ``viewport.scale``.
        viewport: Viewport the lines were laid out against.
        median_font: Page median font height (PDF units).
        config: Acceptance policy. Defaults to HeaderConfig().
        weights: Confidence weights.

    Returns:
        Headers in line order (not yet deduplicated).

    Example:
        >>> headers = detect_text_headers(lines, viewport, median_font=10.0)
        >>> [(h.question_number, round(h.y_position)) for h in headers]
        [(1, 100), (2, 500)]
    """
    config = config or HeaderConfig()
    headers: List[DetectedHeader] = []

    for line in lines:
        if not line.text:
            continue
        match = match_header_number(line.text)
        if match is None:
            continue
        if not is_header_like(line, match, viewport=viewport, median_font=median_font, config=config):
            logger.debug(f"Rejected non-header line {line.text!r} at y={line.top_y:.0f}")
            continue

        headers.append(
            DetectedHeader(
                question_number=match.number,
                y_position=line.top_y,
                x_position=line.left_x * viewport.scale,
                confidence=score_text_header(
                    line, match,
                    viewport=viewport,
                    median_font=median_font,
                    config=config,
                    weights=weights,
                ),
                source=HeaderSource.TEXT,
                text=line.text,
            )
        )

    return headers
