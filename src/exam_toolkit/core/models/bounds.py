"""
Module: bounds

Purpose:
    Provides the SliceBounds dataclass - a horizontal band of a rendered
    page bitmap, plus the scale-independent Coordinates stored on each
    extracted question.

Key Classes:
    - SliceBounds: Pixel band [top, bottom) of a page bitmap for one question
    - Coordinates: yStart/yEnd normalised by the reference scale

Key Functions:
    - SliceBounds.crop_from(image): Crop this band from a PIL image
    - Coordinates.from_pixels(top, bottom, scale): Normalise pixel bounds

Dependencies:
    - dataclasses (std)
    - PIL.Image (TYPE_CHECKING only)

Used By:
    - segmenter.slicing.bounds_calculator
    - core.models.questions
    - correction.session (seeds the crop rectangle)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True, slots=True)
class SliceBounds:
    """
    Pixel band of a page bitmap belonging to one question.

    The band is [top, bottom) over the full page width.

    Attributes:
        question_number: Question the band belongs to
        top: Y of the first row (inclusive)
        bottom: Y of the row after the last (exclusive)

    Invariants:
        - top >= 0
        - bottom > top

    Example:
        >>> b = SliceBounds(question_number=1, top=60, bottom=484)
        >>> b.height
        424
    """

    question_number: int
    top: int
    bottom: int

    def __post_init__(self) -> None:
        """Validate bounds on construction."""
        if self.top < 0:
            raise ValueError(f"top must be >= 0: {self.top}")
        if self.bottom <= self.top:
            raise ValueError(f"bottom must be > top: {self.bottom} <= {self.top}")

    @property
    def height(self) -> int:
        """Height of the band in pixels."""
        return self.bottom - self.top

    def crop_from(self, image: Image.Image) -> Image.Image:
        """
        Crop this band from an image, full width.

        Args:
            image: Page bitmap at the scale the band was computed for

        Returns:
            New PIL Image containing just this band
        """
        return image.crop((0, self.top, image.width, self.bottom))

    def __repr__(self) -> str:
        return f"SliceBounds(q{self.question_number}, {self.top}, {self.bottom})"


@dataclass(frozen=True, slots=True)
class Coordinates:
    """
    Vertical extent of a question, independent of rendering scale.

    Multiply by a rendering scale to get pixels at that scale.

    Attributes:
        y_start: Top of the first part
        y_end: Largest bottom across merged parts
    """

    y_start: float
    y_end: float

    def __post_init__(self) -> None:
        if self.y_start > self.y_end:
            raise ValueError(f"y_start must be <= y_end: {self.y_start} > {self.y_end}")

    @classmethod
    def from_pixels(cls, top: float, bottom: float, scale: float) -> Coordinates:
        """Normalise pixel bounds rendered at ``scale``."""
        if scale <= 0:
            raise ValueError(f"scale must be positive: {scale}")
        return cls(y_start=top / scale, y_end=bottom / scale)

    def extended_to(self, y_end: float) -> Coordinates:
        """Return coordinates whose end covers ``y_end`` as well."""
        return Coordinates(self.y_start, max(self.y_end, y_end))

    def to_dict(self) -> dict:
        """Serialize using the persisted field names."""
        return {"yStart": self.y_start, "yEnd": self.y_end}

    @classmethod
    def from_dict(cls, data: dict) -> Coordinates:
        return cls(y_start=float(data["yStart"]), y_end=float(data["yEnd"]))
