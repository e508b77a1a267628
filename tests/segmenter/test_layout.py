"""Unit tests for text layout analysis."""

import pytest

from fakes import header_token
from exam_toolkit.core.models import PositionedTextToken
from exam_toolkit.segmenter.config import LayoutConfig
from exam_toolkit.segmenter.layout import (
    group_tokens_into_lines,
    line_tolerance,
    median_font_height,
    normalize_spaces,
)
from exam_toolkit.segmenter.source import Viewport


VIEWPORT = Viewport(width=600, height=800, scale=1.0)


class TestMedianFontHeight:
    """Tests for median_font_height()."""

    def test_median_when_even_count_then_upper_median(self):
        tokens = [PositionedTextToken("a", font_height=h) for h in (8, 10, 12, 20)]

        assert median_font_height(tokens) == 12.0

    def test_median_when_zero_heights_then_ignored(self):
        tokens = [PositionedTextToken("a", font_height=h) for h in (0, 0, 9)]

        assert median_font_height(tokens) == 9.0

    def test_median_when_no_positive_heights_then_default(self):
        assert median_font_height([PositionedTextToken("a")], default=11.0) == 11.0
        assert median_font_height([]) == 10.0


class TestLineTolerance:
    """Tests for line_tolerance()."""

    @pytest.mark.parametrize("median, expected", [(10.0, 6.0), (2.0, 3.0), (40.0, 10.0)])
    def test_tolerance_when_median_given_then_clamped(self, median, expected):
        assert line_tolerance(median, LayoutConfig()) == pytest.approx(expected)


class TestGroupTokensIntoLines:
    """Tests for group_tokens_into_lines()."""

    def test_group_when_tokens_near_same_baseline_then_one_line(self):
        """Tokens within the tolerance share a line, ordered by x."""
        # Arrange
        tokens = [
            PositionedTextToken("world", x=120, y=700, font_height=10),
            PositionedTextToken("hello", x=50, y=703, font_height=10),
        ]

        # Act
        lines = group_tokens_into_lines(tokens, VIEWPORT)

        # Assert
        assert len(lines) == 1
        assert lines[0].text == "hello world"
        assert lines[0].left_x == 50
        # The first token seen defines the line's y
        assert lines[0].pdf_y == 700
        assert lines[0].top_y == 100

    def test_group_when_tokens_far_apart_then_sorted_top_down(self):
        tokens = [header_token("bottom", 600), header_token("top", 50), header_token("middle", 300)]

        lines = group_tokens_into_lines(tokens, VIEWPORT)

        assert [ln.text for ln in lines] == ["top", "middle", "bottom"]
        assert [ln.top_y for ln in lines] == [50, 300, 600]

    def test_group_when_whitespace_runs_then_normalised(self):
        tokens = [PositionedTextToken("  Question   ", x=10, y=500, font_height=12),
                  PositionedTextToken("\t4 ", x=90, y=500, font_height=12)]

        lines = group_tokens_into_lines(tokens, VIEWPORT)

        assert lines[0].text == "Question 4"

    def test_group_when_only_blank_tokens_then_no_lines(self):
        tokens = [PositionedTextToken("   ", x=10, y=500, font_height=12)]

        assert group_tokens_into_lines(tokens, VIEWPORT) == []

    def test_group_when_no_tokens_then_empty(self):
        assert group_tokens_into_lines([], VIEWPORT) == []

    def test_group_then_max_font_height_per_line(self):
        tokens = [PositionedTextToken("Q", x=10, y=500, font_height=16),
                  PositionedTextToken("1", x=30, y=501, font_height=11)]

        lines = group_tokens_into_lines(tokens, VIEWPORT)

        assert lines[0].max_font_height == 16
        assert len(lines[0].tokens) == 2


def test_normalize_spaces():
    assert normalize_spaces("  a \n b\t\tc ") == "a b c"
