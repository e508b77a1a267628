"""
Module: segmenter.layout

Purpose:
    Page text layout analysis - groups positioned text tokens into
    reading-order lines. Text layers rarely put tokens of one visual line on
    exactly the same baseline, so tokens are clustered with a tolerance
    derived from the page's median font height.

Key Functions:
    - group_tokens_into_lines(): Tokens of one page -> TextLine list, top to bottom
    - median_font_height(): Upper median of positive font heights
    - line_tolerance(): Clustering tolerance from the median

Dependencies:
    - numpy: Median over token heights
    - segmenter.config: LayoutConfig

Used By:
    - segmenter.detection.text_headers: Lines are classified as headers
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

import numpy as np

from exam_toolkit.core.models import PositionedTextToken, TextLine

from .config import LayoutConfig
from .source import Viewport

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_spaces(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def median_font_height(
    tokens: Sequence[PositionedTextToken],
    default: float = 10.0,
) -> float:
    """
    Upper median of the positive font heights on a page.

    Args:
        tokens: Page tokens.
        default: Returned when no token has a positive height.

    Example:
        >>> median_font_height([PositionedTextToken("a", font_height=h) for h in (8, 10, 12, 20)])
        12.0
    """
    heights = np.sort(np.array([t.font_height for t in tokens if t.font_height > 0], dtype=float))
    if heights.size == 0:
        return float(default)
    return float(heights[heights.size // 2])


def line_tolerance(median: float, config: LayoutConfig) -> float:
    """Vertical clustering tolerance: ratio x median, clamped."""
    return float(np.clip(median * config.tolerance_ratio, config.min_tolerance, config.max_tolerance))


def group_tokens_into_lines(
    tokens: Sequence[PositionedTextToken],
    viewport: Viewport,
    config: LayoutConfig | None = None,
) -> List[TextLine]:
    """
    Group one page's tokens into lines ordered top to bottom.

    Each token joins the first existing line whose representative y (its
    first token's y) is within the tolerance; otherwise it starts a new
    line. Tokens within a line are sorted by x and joined with single
    spaces.

    Args:
        tokens: Tokens of one page in PDF space.
        viewport: Page viewport at the scale line positions are wanted in.
        config: Tolerance settings. Defaults to LayoutConfig().

    Returns:
        Lines sorted top to bottom; empty when the page has no tokens.
        Lines whose text is empty after normalisation are dropped.
    """
    config = config or LayoutConfig()
    if not tokens:
        return []

    tolerance = line_tolerance(median_font_height(tokens, config.default_font_height), config)

    clusters: List[tuple[float, List[PositionedTextToken]]] = []
    for token in tokens:
        for y, members in clusters:
            if abs(y - token.y) <= tolerance:
                members.append(token)
                break
        else:
            clusters.append((token.y, [token]))

    # PDF y grows upward, so the highest y is the top line
    clusters.sort(key=lambda c: c[0], reverse=True)

    lines: List[TextLine] = []
    for y, members in clusters:
        members.sort(key=lambda t: t.x)
        text = normalize_spaces(" ".join(t.text for t in members))
        if not text:
            continue
        lines.append(
            TextLine(
                tokens=tuple(members),
                text=text,
                top_y=viewport.to_canvas_y(y),
                left_x=min(t.x for t in members),
                max_font_height=max(t.font_height for t in members),
                pdf_y=y,
            )
        )

    logger.debug(f"Grouped {len(tokens)} tokens into {len(lines)} lines (tol={tolerance:.1f})")
    return lines
