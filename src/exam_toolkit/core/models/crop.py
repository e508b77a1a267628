"""
Module: crop

Purpose:
    Value types for the crop corrector: the adjustable rectangle in display
    coordinates and the kind of item being corrected.

Key Classes:
    - CropTarget: QUESTION or ANSWER
    - CropRect: Rectangle {x, y, w, h} in display pixels

Used By:
    - correction.geometry: Drag/resize arithmetic
    - correction.session: Session state
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CropTarget(str, Enum):
    """Which extracted list a crop session edits."""

    QUESTION = "QUESTION"
    ANSWER = "ANSWER"


@dataclass(frozen=True, slots=True)
class CropRect:
    """
    Rectangle in image-display coordinates.

    Attributes:
        x: Left edge
        y: Top edge
        w: Width
        h: Height
    """

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def scaled(self, sx: float, sy: float) -> CropRect:
        """Map to another resolution (e.g. display -> bitmap native)."""
        return CropRect(self.x * sx, self.y * sy, self.w * sx, self.h * sy)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.w, self.h)
