"""
Module: segmenter.slicing.bounds_calculator

Purpose:
    Calculate per-question vertical slice bounds on one rendered page from
    the page's deduplicated, y-sorted headers.

Key Functions:
    - calculate_page_bounds(): Headers + page height -> SliceBounds per header

Key Classes:
    - SkippedRegion: A computed band too short to keep
    - PageBounds: Kept bounds plus skipped regions for one page

Dependencies:
    - core.models: DetectedHeader, SliceBounds
    - segmenter.config: SliceConfig

Used By:
    - segmenter.pipeline: SLICE step

Algorithm:
    For header j the band's top is header[j].y - top_padding (clamped at
    0) so text sitting slightly above the detected baseline is kept. The
    bottom is header[j+1].y - bottom_gap when another header follows on
    the page, otherwise the page bottom. Bands shorter than min_height are
    skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from exam_toolkit.core.models import DetectedHeader, SliceBounds

from ..config import SliceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedRegion:
    """A band dropped for being shorter than the minimum height."""
    question_number: int
    top: int
    bottom: int

    @property
    def height(self) -> int:
        return self.bottom - self.top


@dataclass
class PageBounds:
    bounds: List[SliceBounds] = field(default_factory=list)
    skipped: List[SkippedRegion] = field(default_factory=list)


def _clamp(value: float, low: float, high: float) -> int:
    return int(round(max(low, min(high, value))))


def calculate_page_bounds(
    headers: Sequence[DetectedHeader],
    page_height: int,
    config: SliceConfig | None = None,
) -> PageBounds:
    """
    Calculate slice bounds for every header on a page.

    Args:
        headers: Deduplicated headers sorted ascending by y_position, at the
            same scale as the page bitmap.
        page_height: Height of the page bitmap in pixels.
        config: Padding/gap/minimum settings. Defaults to SliceConfig().

    Returns:
        PageBounds with kept bounds (top to bottom) and skipped regions.

    Raises:
        ValueError: If headers are not sorted by y_position.

    Example:
        >>> result = calculate_page_bounds([h1_at_100, h2_at_500], page_height=800)
        >>> [(b.top, b.bottom) for b in result.bounds]
        [(60, 484), (460, 800)]
    """
    config = config or SliceConfig()
    ys = [h.y_position for h in headers]
    if ys != sorted(ys):
        raise ValueError("Headers must be sorted by y_position before slicing")

    result = PageBounds()
    for j, header in enumerate(headers):
        top = _clamp(header.y_position - config.top_padding_px, 0, page_height)
        if j + 1 < len(headers):
            bottom = _clamp(headers[j + 1].y_position - config.bottom_gap_px, 0, page_height)
        else:
            bottom = page_height

        if bottom - top < config.min_height_px:
            logger.debug(
                f"Skipping degenerate region for Q{header.question_number}: "
                f"{top}-{bottom} ({bottom - top}px < {config.min_height_px}px)"
            )
            result.skipped.append(SkippedRegion(header.question_number, top, bottom))
            continue

        result.bounds.append(SliceBounds(question_number=header.question_number, top=top, bottom=bottom))

    return result
