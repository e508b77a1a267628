"""Matching memo answers to already stored questions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from exam_toolkit.core.models import ExtractedQuestion

from .sink import QuestionSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredQuestion:
    """The fields of a stored question that matching looks at."""
    question_id: str
    title: str
    order: int


@dataclass
class AnswerCommitResult:
    """
    Outcome of committing memo answers.

    Attributes:
        committed: (answer number, question_id, uri) per stored answer
        unmatched: Answers with no matching stored question
        without_image: Matched answers that had no image to store
    """
    committed: List[Tuple[int, str, str]] = field(default_factory=list)
    unmatched: List[ExtractedQuestion] = field(default_factory=list)
    without_image: List[ExtractedQuestion] = field(default_factory=list)


def matches(number: int, stored: StoredQuestion) -> bool:
    """
    Whether answer ``number`` belongs to ``stored``.

    True when the title mentions "question N" (case-insensitive, whole
    number), the title is exactly "qN", or the stored order equals N.
    """
    title = stored.title.strip().lower()
    if re.search(rf"\bquestion\s+{number}(?!\d)", title):
        return True
    if title == f"q{number}":
        return True
    return stored.order == number


def find_matching_question(number: int, stored: Sequence[StoredQuestion]) -> Optional[StoredQuestion]:
    """First stored question (in the given order) that matches."""
    for candidate in stored:
        if matches(number, candidate):
            return candidate
    return None


def match_answers_to_questions(
    answers: Sequence[ExtractedQuestion],
    stored: Sequence[StoredQuestion],
) -> List[Tuple[ExtractedQuestion, Optional[StoredQuestion]]]:
    return [(answer, find_matching_question(answer.number, stored)) for answer in answers]


def commit_answers(
    answers: Sequence[ExtractedQuestion],
    stored: Sequence[StoredQuestion],
    sink: QuestionSink,
) -> AnswerCommitResult:
    """
    Attach each memo answer's image to its matching stored question.

    Args:
        answers: Answers extracted from a memo PDF.
        stored: Questions already in the sink.
        sink: QuestionSink receiving the answer images.

    Returns:
        AnswerCommitResult listing what was stored and what was not.
    """
    result = AnswerCommitResult()
    for answer, match in match_answers_to_questions(answers, stored):
        if match is None:
            result.unmatched.append(answer)
            continue
        if answer.image is None:
            result.without_image.append(answer)
            continue
        uri = sink.save_answer(match.question_id, answer.image)
        result.committed.append((answer.number, match.question_id, uri))

    if result.unmatched:
        logger.warning(
            f"{len(result.unmatched)} memo answers matched no stored question: "
            f"{[a.number for a in result.unmatched]}"
        )
    logger.info(f"Committed {len(result.committed)} of {len(answers)} memo answers")
    return result
