"""Unit tests for text-path header detection."""

import pytest

from fakes import body_tokens, header_token
from exam_toolkit.core.models import HeaderSource
from exam_toolkit.segmenter.config import HeaderConfig
from exam_toolkit.segmenter.detection.text_headers import detect_text_headers
from exam_toolkit.segmenter.layout import group_tokens_into_lines, median_font_height
from exam_toolkit.segmenter.source import Viewport


VIEWPORT = Viewport(width=600, height=800, scale=1.0)


def _detect(tokens, config=None, viewport=VIEWPORT):
    lines = group_tokens_into_lines(tokens, viewport)
    return detect_text_headers(lines, viewport, median_font=median_font_height(tokens), config=config)


class TestDetectTextHeaders:
    """Tests for detect_text_headers()."""

    def test_detect_when_keyword_headers_then_positions_in_canvas_space(self):
        """Canvas y comes from the line's PDF baseline flipped against the page height."""
        # Arrange
        tokens = [header_token("Question 1", 100), *body_tokens(5, 200), header_token("Question 2", 500)]

        # Act
        headers = _detect(tokens)

        # Assert
        assert [(h.question_number, h.y_position) for h in headers] == [(1, 100), (2, 500)]
        assert all(h.source is HeaderSource.TEXT for h in headers)
        assert headers[0].x_position == 50
        assert headers[0].text == "Question 1"

    def test_detect_when_viewport_scaled_then_positions_scaled(self):
        tokens = [header_token("Question 1", 100), *body_tokens(5, 200)]
        viewport = Viewport(width=960, height=1280, scale=1.6)

        headers = _detect(tokens, viewport=viewport)

        assert headers[0].y_position == pytest.approx(160)
        assert headers[0].x_position == pytest.approx(80)

    def test_detect_when_split_tokens_on_one_line_then_joined(self):
        """'Question' and '3' as separate runs on one baseline form one header."""
        # Arrange
        tokens = [
            header_token("Question", 100, x=50),
            header_token("3", 101, x=120),
            *body_tokens(5, 200),
        ]

        # Act
        headers = _detect(tokens)

        # Assert
        assert [h.question_number for h in headers] == [3]
        assert headers[0].text == "Question 3"

    def test_detect_when_numeric_header_large_and_left_then_accepted(self):
        tokens = [header_token("1. Describe the water cycle", 100, size=14), *body_tokens(5, 200)]

        headers = _detect(tokens)

        assert [h.question_number for h in headers] == [1]

    def test_detect_when_mark_annotation_right_margin_then_rejected(self):
        """'(4) marks' at the right edge matches the numeric rule but is not a header."""
        # Arrange
        tokens = [header_token("(4) marks", 300, x=500, size=14), *body_tokens(5, 200)]

        # Act
        headers = _detect(tokens)

        # Assert
        assert headers == []

    def test_detect_when_numeric_header_body_font_then_rejected(self):
        """A numbered list item in body font is not a question header."""
        tokens = [header_token("2. Add the salt", 300, size=10), *body_tokens(5, 200)]

        assert _detect(tokens) == []

    def test_detect_when_numeric_line_too_long_then_rejected(self):
        text = "3. " + "very long sentence " * 4
        tokens = [header_token(text, 300, size=14), *body_tokens(5, 200)]

        assert _detect(tokens) == []

    def test_detect_when_keyword_header_right_side_then_still_accepted(self):
        """Keyword headers bypass the layout checks."""
        tokens = [header_token("Question 5", 300, x=400, size=10), *body_tokens(5, 200)]

        assert [h.question_number for h in _detect(tokens)] == [5]

    def test_detect_when_lenient_then_keyword_required_anywhere(self):
        """Lenient mode accepts any matching line that mentions a header keyword."""
        # Arrange
        config = HeaderConfig(strict=False)
        tokens = [
            header_token("1. Describe the cycle", 100, size=14),
            header_token("3. The answer is below", 300, x=400, size=10),
            *body_tokens(5, 200),
        ]

        # Act
        headers = _detect(tokens, config=config)

        # Assert
        assert [h.question_number for h in headers] == [3]

    def test_detect_when_keyword_then_higher_confidence_than_numeric(self):
        tokens = [
            header_token("Question 1", 100, size=14),
            header_token("2. Describe", 400, size=14),
            *body_tokens(5, 200),
        ]

        q1, q2 = _detect(tokens)

        assert q1.confidence > q2.confidence
        assert 0.0 <= q2.confidence <= 1.0
        assert q1.confidence == 1.0

    def test_detect_when_no_lines_then_empty(self):
        assert detect_text_headers([], VIEWPORT, median_font=10.0) == []
