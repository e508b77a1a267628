"""Unit tests for QuestionAccumulatorMap."""

import pytest
from PIL import Image

from exam_toolkit.core.models import SliceBounds
from exam_toolkit.segmenter.slicing.accumulator import QuestionAccumulatorMap


@pytest.fixture
def page_image():
    return Image.new("RGB", (960, 1280), "white")


class TestQuestionAccumulatorMap:
    """Tests for slice accumulation across pages."""

    def test_add_slice_when_new_number_then_creates_accumulator(self, page_image):
        # Arrange
        acc = QuestionAccumulatorMap(reference_scale=1.6)

        # Act
        entry = acc.add_slice(page_image, SliceBounds(2, 160, 800), page_number=3)

        # Assert
        assert acc.get(2) is not None
        assert len(acc) == 1
        assert entry.first_page == 3
        assert entry.coordinates.y_start == pytest.approx(100)
        assert entry.coordinates.y_end == pytest.approx(500)
        assert entry.parts[0].size == (960, 640)

    def test_add_slice_when_number_seen_then_appends_part(self, page_image):
        """A later slice of the same number extends the first one."""
        # Arrange
        acc = QuestionAccumulatorMap(reference_scale=1.0)
        acc.add_slice(page_image, SliceBounds(1, 600, 1280), page_number=1)

        # Act
        acc.add_slice(page_image, SliceBounds(1, 0, 300), page_number=2)

        # Assert
        entry = acc.get(1)
        assert len(entry.parts) == 2
        assert entry.first_page == 1
        assert (entry.coordinates.y_start, entry.coordinates.y_end) == (600, 1280)

    def test_finalize_then_sorted_by_number_and_stitched(self, page_image):
        # Arrange
        acc = QuestionAccumulatorMap(reference_scale=1.0)
        acc.add_slice(page_image, SliceBounds(3, 0, 100), page_number=1)
        acc.add_slice(page_image, SliceBounds(1, 100, 300), page_number=1)
        acc.add_slice(page_image, SliceBounds(1, 0, 50), page_number=2)

        # Act
        questions = acc.finalize("Q{number}")

        # Assert
        assert [q.number for q in questions] == [1, 3]
        q1 = questions[0]
        assert q1.text == "Q1"
        assert q1.image.size == (960, 250)
        assert len(q1.source_images) == 2
        assert questions[1].image is questions[1].source_images[0]

    def test_finalize_when_empty_then_empty(self):
        assert QuestionAccumulatorMap(reference_scale=1.6).finalize() == []

    def test_get_when_missing_then_none(self):
        acc = QuestionAccumulatorMap(reference_scale=1.6)

        assert acc.get(7) is None
        assert list(acc) == []
