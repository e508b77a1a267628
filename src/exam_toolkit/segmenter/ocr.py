"""
Module: segmenter.ocr

Purpose:
    Optical recognition engine contract and an EasyOCR-backed engine. An
    engine takes a page bitmap and returns recognised lines with bounding
    boxes in that bitmap's own pixel space. Order is approximate; consumers
    re-sort by box y.

Key Classes:
    - RecognizedLine: Text with an (x0, y0, x1, y1) box
    - RecognitionEngine: Protocol for engines
    - EasyOCREngine: Lazily constructed easyocr.Reader

Key Functions:
    - merge_boxes_into_lines(): Join word/phrase boxes sharing a row
    - easyocr_available(): Whether the optional engine can be imported

Dependencies:
    - numpy: Bitmap -> array for the reader
    - easyocr (optional extra): Text recognition

Used By:
    - segmenter.pipeline: OCR_DETECT step
    - segmenter.detection.ocr_headers: Consumes RecognizedLine
"""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

Box = Tuple[float, float, float, float]


@dataclass(frozen=True)
class RecognizedLine:
    """
    One recognised text line.

    Attributes:
        text: Recognised text
        bbox: (x0, y0, x1, y1) in recognition-bitmap pixels
        confidence: Engine confidence, if reported
    """
    text: str
    bbox: Box
    confidence: float = 1.0

    @property
    def height(self) -> float:
        return self.bbox[3] - self.bbox[1]


@runtime_checkable
class RecognitionEngine(Protocol):
    def recognize(self, image: Image.Image) -> List[RecognizedLine]: ...


def _poly_to_xyxy(poly: Sequence[Sequence[float]]) -> Box:
    xs = [p[0] for p in poly]
    ys = [p[1] for p in poly]
    return float(min(xs)), float(min(ys)), float(max(xs)), float(max(ys))


def merge_boxes_into_lines(
    boxes: Sequence[Tuple[str, Box, float]],
    *,
    overlap_ratio: float = 0.5,
) -> List[RecognizedLine]:
    """
    Merge word/phrase boxes into lines.

    Two boxes share a line when their vertical overlap covers at least
    ``overlap_ratio`` of the shorter box. Text within a line is joined left
    to right; line confidence is the minimum of its members.

    Args:
        boxes: (text, bbox, confidence) tuples in any order.
        overlap_ratio: Required vertical overlap fraction.

    Returns:
        Lines sorted by top y.
    """
    rows: List[List[Tuple[str, Box, float]]] = []
    for item in sorted(boxes, key=lambda b: (b[1][1], b[1][0])):
        _, (x0, y0, x1, y1), _ = item
        for row in rows:
            ry0 = min(b[1][1] for b in row)
            ry1 = max(b[1][3] for b in row)
            overlap = min(y1, ry1) - max(y0, ry0)
            shorter = min(y1 - y0, ry1 - ry0)
            if shorter > 0 and overlap >= overlap_ratio * shorter:
                row.append(item)
                break
        else:
            rows.append([item])

    lines: List[RecognizedLine] = []
    for row in rows:
        row.sort(key=lambda b: b[1][0])
        text = " ".join(b[0].strip() for b in row if b[0].strip())
        if not text:
            continue
        bbox = (
            min(b[1][0] for b in row),
            min(b[1][1] for b in row),
            max(b[1][2] for b in row),
            max(b[1][3] for b in row),
        )
        lines.append(RecognizedLine(text=text, bbox=bbox, confidence=min(b[2] for b in row)))

    lines.sort(key=lambda ln: ln.bbox[1])
    return lines


@lru_cache(maxsize=None)
def easyocr_available() -> bool:
    """True if easyocr is installed; a missing engine is logged once per process."""
    if importlib.util.find_spec("easyocr") is not None:
        return True
    logger.warning("easyocr is not installed; scanned pages will not be recognised (pip install exam-toolkit[ocr])")
    return False


class EasyOCREngine:
    """
    Recognition engine backed by easyocr.

    The reader loads models on first use, so constructing the engine is
    cheap and pipelines that never hit a scanned page never pay for it.

    Example:
        >>> engine = EasyOCREngine(languages=("en",))
        >>> lines = engine.recognize(page_image)
    """

    def __init__(self, languages: Sequence[str] = ("en",), *, gpu: bool = False):
        self.languages = list(languages)
        self.gpu = gpu
        self._reader: Optional[Any] = None

    def _get_reader(self) -> Any:
        if self._reader is None:
            import easyocr

            logger.info(f"Loading EasyOCR reader for {','.join(self.languages)}")
            self._reader = easyocr.Reader(self.languages, gpu=self.gpu)
        return self._reader

    def recognize(self, image: Image.Image) -> List[RecognizedLine]:
        reader = self._get_reader()
        results = reader.readtext(np.array(image.convert("RGB")))
        boxes = [
            (text, _poly_to_xyxy(poly), float(confidence))
            for poly, text, confidence in results
        ]
        return merge_boxes_into_lines(boxes)
