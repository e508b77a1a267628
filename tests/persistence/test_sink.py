"""Unit tests for the sink contract and bulk question commit."""

import pytest

from fakes import RecordingSink
from exam_toolkit.core.models import Coordinates, ExtractedQuestion
from exam_toolkit.persistence import DirectorySink, QuestionRecord, QuestionSink, commit_questions, record_for


def _question(number, image, marks=0):
    return ExtractedQuestion(
        number=number, text=f"(Merged question {number})", image=image,
        page=1, coordinates=Coordinates(0, 100), marks=marks,
    )


class TestCommitQuestions:
    """Tests for commit_questions()."""

    def test_commit_when_unsorted_then_committed_by_number(self, sample_image):
        """Orders follow question numbers and continue after existing entries."""
        # Arrange
        sink = RecordingSink()
        questions = [_question(3, sample_image), _question(1, sample_image, marks=4), _question(2, sample_image)]

        # Act
        ids = commit_questions(questions, sink, existing_count=5)

        # Assert
        assert [r.question_number for r in sink.records] == [1, 2, 3]
        assert [r.order for r in sink.records] == [6, 7, 8]
        assert sink.records[0].marks == 4
        assert ids == ["mem://q6", "mem://q7", "mem://q8"]

    def test_commit_when_empty_then_nothing_saved(self):
        sink = RecordingSink()

        assert commit_questions([], sink) == []
        assert sink.records == []

    def test_commit_when_negative_existing_count_then_raises(self, sample_image):
        with pytest.raises(ValueError):
            commit_questions([_question(1, sample_image)], RecordingSink(), existing_count=-1)

    def test_commit_to_directory_then_sequential_folders(self, tmp_path, sample_image):
        sink = DirectorySink(tmp_path)

        commit_questions([_question(2, sample_image), _question(1, sample_image)], sink)

        assert [s.title for s in sink.stored_questions()] == ["Question 1", "Question 2"]


class TestQuestionRecord:
    """Tests for QuestionRecord and record_for()."""

    def test_record_for_then_fields_copied(self, sample_image):
        record = record_for(_question(4, sample_image, marks=2.5), order=9)

        assert (record.question_number, record.order, record.marks, record.page) == (4, 9, 2.5, 1)
        assert record.extra_text == "(Merged question 4)"
        assert record.title == "Question 4"

    @pytest.mark.parametrize("kwargs", [{"question_number": 0}, {"order": 0}, {"marks": -1}])
    def test_init_when_invalid_then_raises(self, kwargs):
        fields = dict(question_number=1, image=None)
        fields.update(kwargs)

        with pytest.raises(ValueError):
            QuestionRecord(**fields)

    def test_sinks_satisfy_protocol(self, tmp_path):
        assert isinstance(DirectorySink(tmp_path), QuestionSink)
        assert isinstance(RecordingSink(), QuestionSink)
