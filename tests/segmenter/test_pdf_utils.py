"""Unit tests for PDF utilities."""

from unittest.mock import Mock

import pytest
from PIL import Image

from exam_toolkit.segmenter.utils.pdf import (
    crop_page_rect,
    extract_text_tokens,
    get_page_dimensions,
    render_page,
)


def _mock_page(width=595, height=842, text_dict=None):
    page = Mock()
    page.rect.width = width
    page.rect.height = height
    page.get_text.return_value = text_dict or {"blocks": []}
    return page


class TestRenderPage:
    """Tests for render_page function."""

    def test_render_page_when_valid_scale_then_returns_image(self):
        """Render page returns PIL Image of the pixmap size."""
        # Arrange
        page = Mock()
        pix = Mock(width=100, height=50, samples=bytes(100 * 50 * 3))
        page.get_pixmap.return_value = pix

        # Act
        image = render_page(page, scale=1.0)

        # Assert
        assert isinstance(image, Image.Image)
        assert image.size == (100, 50)
        assert image.mode == "RGB"

    @pytest.mark.parametrize("scale", [0, -1.5])
    def test_render_page_when_scale_not_positive_then_raises(self, scale):
        with pytest.raises(ValueError, match="Invalid scale"):
            render_page(Mock(), scale=scale)


class TestGetPageDimensions:
    """Tests for get_page_dimensions function."""

    def test_get_page_dimensions_when_scaled_then_multiplied(self):
        page = _mock_page(width=500, height=800)

        assert get_page_dimensions(page, scale=2.0) == (1000, 1600)


class TestCropPageRect:
    """Tests for crop_page_rect function."""

    def test_crop_when_inside_then_exact_region(self):
        image = Image.new("RGB", (200, 100))

        assert crop_page_rect(image, 10, 20, 50, 30).size == (50, 30)

    def test_crop_when_overflowing_then_clamped_to_image(self):
        """Width and height shrink to what is left of the bitmap."""
        image = Image.new("RGB", (200, 100))

        assert crop_page_rect(image, 150, 80, 500, 500).size == (50, 20)

    def test_crop_when_negative_origin_then_clamped_to_zero(self):
        image = Image.new("RGB", (200, 100))

        assert crop_page_rect(image, -30, -10, 40, 40).size == (40, 40)

    def test_crop_when_zero_size_then_at_least_one_pixel(self):
        image = Image.new("RGB", (200, 100))

        assert crop_page_rect(image, 10, 10, 0, 0).size == (1, 1)


class TestExtractTextTokens:
    """Tests for extract_text_tokens function."""

    def test_extract_when_spans_then_bottom_up_tokens(self):
        """Span origins are flipped from top-down to PDF space."""
        # Arrange
        page = _mock_page(
            height=800,
            text_dict={
                "blocks": [
                    {"lines": [{"spans": [
                        {"text": "Question 1", "origin": (50.0, 100.0), "size": 12.0},
                        {"text": "   ", "origin": (200.0, 100.0), "size": 12.0},
                    ]}]},
                    {"type": 1},
                ]
            },
        )

        # Act
        tokens = extract_text_tokens(page)

        # Assert
        assert len(tokens) == 1
        assert (tokens[0].text, tokens[0].x, tokens[0].y, tokens[0].font_height) == ("Question 1", 50.0, 700.0, 12.0)

    def test_extract_when_no_blocks_then_empty(self):
        assert extract_text_tokens(_mock_page()) == []

    def test_extract_when_page_raises_then_propagates(self):
        page = _mock_page()
        page.get_text.side_effect = RuntimeError("broken content stream")

        with pytest.raises(RuntimeError):
            extract_text_tokens(page)
