"""
Module: persistence

Purpose:
    Committing reviewed questions and memo answers to a sink.

Key Classes:
    - QuestionSink / QuestionRecord: Sink contract
    - DirectorySink: Local directory implementation
"""

from .directory import DirectorySink
from .matching import (
    AnswerCommitResult,
    StoredQuestion,
    commit_answers,
    find_matching_question,
    match_answers_to_questions,
)
from .sink import QuestionRecord, QuestionSink, commit_questions, record_for

__all__ = [
    "AnswerCommitResult",
    "DirectorySink",
    "QuestionRecord",
    "QuestionSink",
    "StoredQuestion",
    "commit_answers",
    "commit_questions",
    "find_matching_question",
    "match_answers_to_questions",
    "record_for",
]
