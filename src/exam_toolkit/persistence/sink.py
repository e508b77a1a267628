"""
Module: persistence.sink

Purpose:
    Persistence sink contract and bulk commit of extracted questions. A
    sink stores one question record (image blob plus a few fields) and
    hands back a retrievable identifier; how and where is its own concern.

Key Classes:
    - QuestionRecord: What a sink stores for one question
    - QuestionSink: Protocol every sink satisfies

Key Functions:
    - record_for(): ExtractedQuestion + order -> QuestionRecord
    - commit_questions(): Store a reviewed list in question-number order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from PIL import Image

from exam_toolkit.core.models import Coordinates, ExtractedQuestion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionRecord:
    """
    One question as handed to a sink.

    Attributes:
        question_number: Number detected in the source document
        image: Stitched question image, None if nothing was sliced
        marks: Operator-entered marks
        order: Position among all stored questions (1-indexed)
        extra_text: Free text stored with the question
        page: First page the question appears on
        coordinates: Extent on that page, scale-independent
    """
    question_number: int
    image: Optional[Image.Image]
    marks: float = 0
    order: int = 1
    extra_text: Optional[str] = None
    page: Optional[int] = None
    coordinates: Optional[Coordinates] = None

    def __post_init__(self) -> None:
        if self.question_number < 1:
            raise ValueError(f"question_number must be positive: {self.question_number}")
        if self.order < 1:
            raise ValueError(f"order must be 1-indexed: {self.order}")
        if self.marks < 0:
            raise ValueError(f"marks cannot be negative: {self.marks}")

    @property
    def title(self) -> str:
        return f"Question {self.question_number}"


@runtime_checkable
class QuestionSink(Protocol):
    def save_question(self, record: QuestionRecord) -> str:
        """Store a question; return a stable identifier/URI for it."""
        ...

    def save_answer(self, question_id: str, image: Image.Image) -> str:
        """Attach an answer image to a stored question; return its URI."""
        ...


def record_for(question: ExtractedQuestion, order: int) -> QuestionRecord:
    return QuestionRecord(
        question_number=question.number,
        image=question.image,
        marks=question.marks,
        order=order,
        extra_text=question.text,
        page=question.page,
        coordinates=question.coordinates,
    )


def commit_questions(
    questions: Sequence[ExtractedQuestion],
    sink: QuestionSink,
    *,
    existing_count: int = 0,
) -> List[str]:
    """
    Store reviewed questions through a sink.

    Questions are committed in ascending question-number order and get
    order values continuing after the already stored ones.

    Args:
        questions: Reviewed questions (operator edits already applied).
        sink: Destination.
        existing_count: Number of questions already stored.

    Returns:
        Identifiers returned by the sink, in commit order.

    Example:
        >>> commit_questions(result.questions, DirectorySink(Path("out")), existing_count=2)
        ['file:///.../q3', 'file:///.../q4']
    """
    if existing_count < 0:
        raise ValueError(f"existing_count cannot be negative: {existing_count}")

    identifiers: List[str] = []
    for offset, question in enumerate(sorted(questions, key=lambda q: q.number), start=1):
        identifiers.append(sink.save_question(record_for(question, existing_count + offset)))

    logger.info(f"Committed {len(identifiers)} questions (orders {existing_count + 1}..{existing_count + len(identifiers)})")
    return identifiers
