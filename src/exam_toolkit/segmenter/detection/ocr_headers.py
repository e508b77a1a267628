"""
Module: segmenter.detection.ocr_headers

Purpose:
    OCR-path header detection - applies the same keyword/numeric rules as
    the text path to recognised lines of a rasterised page, gates them on
    left-margin position and box height, and converts positions from the
    recognition scale to the reference slicing scale.

Key Functions:
    - detect_ocr_headers(): Recognised lines -> DetectedHeader list
    - score_ocr_header(): Confidence for an accepted recognised line

Dependencies:
    - segmenter.detection.patterns: Header regexes
    - common.thresholds: OCR confidence weights

Used By:
    - segmenter.pipeline: OCR_DETECT step
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from exam_toolkit.common.thresholds import OCR_CONFIDENCE, OCRConfidenceWeights, clamp_confidence
from exam_toolkit.core.models import DetectedHeader, HeaderSource

from ..config import OCRConfig
from ..ocr import RecognizedLine
from .patterns import HeaderMatch, match_header_number

logger = logging.getLogger(__name__)


def score_ocr_header(
    line: RecognizedLine,
    match: HeaderMatch,
    *,
    left_aligned: bool,
    config: OCRConfig,
    weights: OCRConfidenceWeights = OCR_CONFIDENCE,
) -> float:
    score = weights.base
    if match.is_keyword:
        score += weights.keyword_bonus
    if left_aligned:
        score += weights.left_aligned_bonus
    if line.height >= config.tall_box_height_px:
        score += weights.tall_box_bonus
    return clamp_confidence(score)


def detect_ocr_headers(
    lines: Sequence[RecognizedLine],
    *,
    bitmap_width: float,
    reference_scale: float,
    config: OCRConfig | None = None,
    weights: OCRConfidenceWeights = OCR_CONFIDENCE,
) -> List[DetectedHeader]:
    """
    Detect headers among recognised lines of one page.

    Args:
        lines: Recognised lines in recognition-bitmap pixels, any order.
        bitmap_width: Width of the recognition bitmap in pixels.
        reference_scale: Scale the returned positions are expressed at.
        config: OCR gating settings. Defaults to OCRConfig().
        weights: Confidence weights.

    Returns:
        Headers sorted top to bottom, positions at ``reference_scale``.
    """
    config = config or OCRConfig()
    ratio = reference_scale / config.scale
    margin = bitmap_width * config.left_margin_ratio
    headers: List[DetectedHeader] = []

    for line in sorted(lines, key=lambda ln: ln.bbox[1]):
        match = match_header_number(line.text)
        if match is None:
            continue
        x0, y0 = line.bbox[0], line.bbox[1]
        left_aligned = x0 <= margin
        if not left_aligned:
            logger.debug(f"OCR line {line.text!r} rejected: x0={x0:.0f} outside margin {margin:.0f}")
            continue
        if line.height < config.min_box_height_px:
            logger.debug(f"OCR line {line.text!r} rejected: box height {line.height:.0f}px")
            continue

        headers.append(
            DetectedHeader(
                question_number=match.number,
                y_position=y0 * ratio,
                x_position=x0 * ratio,
                confidence=score_ocr_header(
                    line, match, left_aligned=left_aligned, config=config, weights=weights
                ),
                source=HeaderSource.OCR,
                text=line.text,
            )
        )

    return headers
