"""
Module: segmenter.slicing.accumulator

Purpose:
    Keyed accumulation of question slices across a whole document. Each
    question number gets one accumulator; later pages upsert into it, so a
    question continued on the next page ends up as one ExtractedQuestion
    with several parts.

Key Classes:
    - QuestionAccumulatorMap: question number -> QuestionAccumulator

Used By:
    - segmenter.pipeline: One map per pipeline run, never shared
"""

from __future__ import annotations

import logging
from typing import Dict, List

from PIL import Image

from exam_toolkit.core.models import (
    Coordinates,
    ExtractedQuestion,
    QuestionAccumulator,
    SliceBounds,
)

from .compositor import stitch_images

logger = logging.getLogger(__name__)


class QuestionAccumulatorMap:
    """
    Upsert-only mapping of question number to accumulated slices.

    Example:
        >>> acc = QuestionAccumulatorMap(reference_scale=1.0)
        >>> acc.add_slice(page_image, SliceBounds(3, 60, 800), page_number=2)
        >>> acc.add_slice(page_image, SliceBounds(3, 0, 200), page_number=3)
        >>> [q.number for q in acc.finalize()]
        [3]
    """

    def __init__(self, reference_scale: float):
        self.reference_scale = reference_scale
        self._by_number: Dict[int, QuestionAccumulator] = {}

    def __len__(self) -> int:
        return len(self._by_number)

    def get(self, number: int) -> QuestionAccumulator | None:
        return self._by_number.get(number)

    def add_slice(self, page_image: Image.Image, bounds: SliceBounds, *, page_number: int) -> QuestionAccumulator:
        """
        Crop ``bounds`` from the page and upsert it under its question number.

        Args:
            page_image: Page bitmap at the reference scale.
            bounds: Band to crop.
            page_number: 1-indexed page the band comes from.

        Returns:
            The (possibly new) accumulator for the question.
        """
        part = bounds.crop_from(page_image)
        coords = Coordinates.from_pixels(bounds.top, bounds.bottom, self.reference_scale)

        accumulator = self._by_number.get(bounds.question_number)
        if accumulator is None:
            accumulator = QuestionAccumulator(
                number=bounds.question_number,
                first_page=page_number,
                coordinates=coords,
                parts=[part],
            )
            self._by_number[bounds.question_number] = accumulator
        else:
            accumulator.add_part(part, coords)
            logger.debug(
                f"Merged part {len(accumulator.parts)} of Q{bounds.question_number} from page {page_number}"
            )
        return accumulator

    def finalize(self, placeholder_text: str = "(Merged question {number})") -> List[ExtractedQuestion]:
        """
        Stitch every accumulator into an ExtractedQuestion.

        Returns:
            One question per number, sorted ascending by number.
        """
        questions: List[ExtractedQuestion] = []
        for number in sorted(self._by_number):
            acc = self._by_number[number]
            questions.append(
                ExtractedQuestion(
                    number=acc.number,
                    text=placeholder_text.format(number=acc.number),
                    image=stitch_images(acc.parts),
                    source_images=tuple(acc.parts),
                    page=acc.first_page,
                    coordinates=acc.coordinates,
                )
            )
        return questions
