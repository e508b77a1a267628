"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .thresholds import (
    OCR_CONFIDENCE,
    TEXT_CONFIDENCE,
    OCRConfidenceWeights,
    TextConfidenceWeights,
    clamp_confidence,
)

__all__ = [
    "OCR_CONFIDENCE",
    "TEXT_CONFIDENCE",
    "OCRConfidenceWeights",
    "TextConfidenceWeights",
    "clamp_confidence",
]
