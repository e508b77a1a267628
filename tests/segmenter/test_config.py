"""Unit tests for segmentation configuration and confidence weights."""

from dataclasses import replace

import pytest

from exam_toolkit.common.thresholds import OCR_CONFIDENCE, TEXT_CONFIDENCE, clamp_confidence
from exam_toolkit.segmenter.config import OCRConfig, SegmentationConfig


class TestSegmentationConfig:
    """Tests for SegmentationConfig defaults and validation."""

    def test_defaults(self):
        config = SegmentationConfig()

        assert config.reference_scale == 1.6
        assert config.ocr.scale == 1.2
        assert config.ocr.max_pages == 6
        assert config.ocr.sparse_token_count == 30
        assert config.slicing.top_padding_px == 40
        assert config.slicing.bottom_gap_px == 16
        assert config.slicing.min_height_px == 40
        assert config.slicing.dedupe_window_px == 18.0
        assert config.headers.strict is True

    def test_replace_when_overriding_nested_then_rest_kept(self):
        config = SegmentationConfig()

        updated = replace(config, ocr=replace(config.ocr, max_pages=2))

        assert updated.ocr.max_pages == 2
        assert updated.ocr.scale == config.ocr.scale
        assert config.ocr.max_pages == 6

    @pytest.mark.parametrize("kwargs", [{"reference_scale": 0}, {"ocr": OCRConfig(scale=-1.0)}])
    def test_init_when_scale_not_positive_then_raises(self, kwargs):
        with pytest.raises(ValueError, match="must be positive"):
            SegmentationConfig(**kwargs)


class TestConfidenceWeights:
    """Tests for the shared confidence weights."""

    def test_keyword_outweighs_layout_bonuses(self):
        """A keyword alone scores above a bare number with every layout bonus."""
        keyword_only = TEXT_CONFIDENCE.base + TEXT_CONFIDENCE.keyword_bonus
        numeric_best = TEXT_CONFIDENCE.base + TEXT_CONFIDENCE.large_font_bonus + TEXT_CONFIDENCE.left_aligned_bonus

        assert keyword_only > numeric_best
        assert OCR_CONFIDENCE.base < TEXT_CONFIDENCE.base

    @pytest.mark.parametrize("value, expected", [(-0.2, 0.0), (0.4, 0.4), (1.3, 1.0)])
    def test_clamp_confidence(self, value, expected):
        assert clamp_confidence(value) == expected
