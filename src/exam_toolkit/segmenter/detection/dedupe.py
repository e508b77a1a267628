"""Deduplication of header candidates found on one page."""

from __future__ import annotations

from typing import Dict, Iterable, List

from exam_toolkit.core.models import DetectedHeader

__all__ = ["dedupe_headers"]


def _better(candidate: DetectedHeader, current: DetectedHeader) -> bool:
    # Ties keep the higher header on the page
    if candidate.confidence != current.confidence:
        return candidate.confidence > current.confidence
    return candidate.y_position < current.y_position


def dedupe_headers(headers: Iterable[DetectedHeader], window_px: float = 18.0) -> List[DetectedHeader]:
    """
    Collapse duplicate header candidates of one page.

    First keeps one candidate per question number (highest confidence),
    then collapses candidates within ``window_px`` vertically
    (highest confidence wins). Works across TEXT and OCR candidates.

    Args:
        headers: Candidates from any detector, any order.
        window_px: Vertical distance below which headers collapse.

    Returns:
        Headers sorted ascending by y_position.

    Example:
        >>> a = DetectedHeader(question_number=2, y_position=300, confidence=0.6)
        >>> b = DetectedHeader(question_number=2, y_position=310, confidence=0.9)
        >>> dedupe_headers([a, b]) == [b]
        True
    """
    by_number: Dict[int, DetectedHeader] = {}
    for header in headers:
        current = by_number.get(header.question_number)
        if current is None or _better(header, current):
            by_number[header.question_number] = header

    kept: List[DetectedHeader] = []
    for header in sorted(by_number.values(), key=lambda h: h.y_position):
        if kept and abs(header.y_position - kept[-1].y_position) <= window_px:
            if _better(header, kept[-1]):
                kept[-1] = header
            continue
        kept.append(header)

    return kept
