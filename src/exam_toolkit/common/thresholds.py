"""Centralized confidence weights for header detection.

Both header detectors score candidates so that text-path and OCR-path
results for the same page can be deduplicated against each other. The
weights are empirical and uncalibrated against a real test corpus; keep
them here so they can be tuned in one place.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TextConfidenceWeights:
    """Scoring for headers found in the PDF text layer."""

    base: float = 0.5
    keyword_bonus: float = 0.35  # "Question", "Q", "Answer", "Solution"
    large_font_bonus: float = 0.15
    large_font_ratio: float = 1.2  # Font height vs page median to earn the bonus
    left_aligned_bonus: float = 0.10


@dataclass(frozen=True)
class OCRConfidenceWeights:
    """Scoring for headers found by optical recognition."""

    base: float = 0.45
    keyword_bonus: float = 0.35
    left_aligned_bonus: float = 0.10
    tall_box_bonus: float = 0.10


# Global instances for easy import
TEXT_CONFIDENCE = TextConfidenceWeights()
OCR_CONFIDENCE = OCRConfidenceWeights()


def clamp_confidence(value: float) -> float:
    """Clamp a score into [0, 1]."""
    return max(0.0, min(1.0, value))
