"""
Module: questions

Purpose:
    Per-question records of the segmentation pipeline. A QuestionAccumulator
    grows while pages are processed; an ExtractedQuestion is the finalised,
    immutable output unit handed to the caller for review and persistence.

Key Classes:
    - QuestionAccumulator: In-progress slices for one question number
    - ExtractedQuestion: Final stitched question with its source slices

Dependencies:
    - PIL.Image: Slice and composite images
    - .bounds.Coordinates: Scale-independent vertical extent

Used By:
    - segmenter.slicing.accumulator: Upserts accumulators per page
    - segmenter.pipeline: Returns ExtractedQuestion list
    - correction.session: Replaces the image of an ExtractedQuestion
    - persistence: Commits ExtractedQuestion records
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from PIL import Image

from .bounds import Coordinates


@dataclass
class QuestionAccumulator:
    """
    All slices found so far for one question number across the document.

    Attributes:
        number: Question number (global across the document)
        first_page: 1-indexed page where the question was first seen
        coordinates: Extent of the first part, end extended by later parts
        parts: Slice images in page order
    """

    number: int
    first_page: int
    coordinates: Coordinates
    parts: List[Image.Image] = field(default_factory=list)

    def add_part(self, image: Image.Image, coordinates: Coordinates) -> None:
        """Append a slice and extend the stored end coordinate."""
        self.parts.append(image)
        self.coordinates = self.coordinates.extended_to(coordinates.y_end)


@dataclass(frozen=True)
class ExtractedQuestion:
    """
    One detected question, ready for review.

    Attributes:
        number: Question number
        text: Placeholder/diagnostic text
        marks: Operator-editable mark value (default 0)
        image: Single stitched image, or None when nothing was sliced
        source_images: Per-part images in order
        page: 1-indexed first page the question appears on
        coordinates: Scale-independent vertical extent on the first page

    Example:
        >>> q = ExtractedQuestion(number=2, text="(Merged question 2)", image=img,
        ...                       source_images=(img,), page=1,
        ...                       coordinates=Coordinates(287.5, 500.0))
        >>> q.with_marks(6).marks
        6
    """

    number: int
    text: str
    image: Optional[Image.Image]
    page: int
    coordinates: Coordinates
    source_images: Tuple[Image.Image, ...] = ()
    marks: float = 0

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError(f"Question number must be positive: {self.number}")
        if self.page < 1:
            raise ValueError(f"page must be 1-indexed: {self.page}")
        if self.marks < 0:
            raise ValueError(f"marks cannot be negative: {self.marks}")

    def with_marks(self, marks: float) -> ExtractedQuestion:
        """Return a copy with operator-edited marks."""
        return replace(self, marks=marks)

    def with_image(self, image: Image.Image) -> ExtractedQuestion:
        """Return a copy whose stitched image is replaced (crop correction)."""
        return replace(self, image=image)

    @property
    def title(self) -> str:
        return f"Question {self.number}"
