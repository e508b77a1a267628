"""
Core Models Package

Immutable, validated data models shared by the segmenter, the crop
corrector and persistence.

**DESIGN RATIONALE:**

Records that cross module boundaries are frozen dataclasses validated on
construction. Raw text-layer data is parsed into these types once
(PositionedTextToken.from_transform) and never passed around untyped.
The only mutable record is QuestionAccumulator, owned by one pipeline run.
"""

from .bounds import Coordinates, SliceBounds
from .crop import CropRect, CropTarget
from .headers import DetectedHeader, HeaderSource
from .questions import ExtractedQuestion, QuestionAccumulator
from .tokens import PositionedTextToken, TextLine

__all__ = [
    "Coordinates",
    "CropRect",
    "CropTarget",
    "DetectedHeader",
    "ExtractedQuestion",
    "HeaderSource",
    "PositionedTextToken",
    "QuestionAccumulator",
    "SliceBounds",
    "TextLine",
]
