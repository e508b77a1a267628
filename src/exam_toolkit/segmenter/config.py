"""
Module: segmenter.config

Purpose:
    Configuration dataclasses for the question segmentation pipeline. Every
    heuristic constant used by layout analysis, header detection, OCR
    fallback and slicing is a named field here so it can be overridden
    with dataclasses.replace() instead of editing literals.

Key Classes:
    - SegmentationConfig: Main configuration for a pipeline run
    - LayoutConfig: Line clustering tolerance
    - HeaderConfig: Text-path header acceptance policy
    - OCRConfig: OCR fallback trigger, cap and gating
    - SliceConfig: Slice padding, gap, minimum height, dedupe window

Dependencies:
    - dataclasses: For frozen dataclass support

Used By:
    - segmenter.pipeline: Uses SegmentationConfig for pipeline settings
    - segmenter.layout / detection / slicing: Read their own sub-config

Calibration:
    The defaults are the empirically tuned values of the original tool.
    They have not been calibrated against a reference corpus.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LayoutConfig:
    """
    Vertical clustering of text tokens into lines.

    Attributes:
        tolerance_ratio: Tolerance as a fraction of the median font height.
        min_tolerance: Lower clamp for the tolerance (PDF units).
        max_tolerance: Upper clamp for the tolerance (PDF units).
        default_font_height: Median used when no token has a positive height.
    """
    tolerance_ratio: float = 0.6
    min_tolerance: float = 3.0
    max_tolerance: float = 10.0
    default_font_height: float = 10.0


@dataclass(frozen=True)
class HeaderConfig:
    """
    Text-path header acceptance.

    Attributes:
        strict: Require bare numeric headers to look like headers
            (left margin, larger font, short line). Keyword headers are
            always accepted.
        left_margin_ratio: Fraction of page width counted as left margin.
        min_font_ratio: Font height vs page median required in strict mode.
        max_line_chars: Longest line accepted as a bare numeric header.
    """
    strict: bool = True
    left_margin_ratio: float = 0.20
    min_font_ratio: float = 1.15
    max_line_chars: int = 50


@dataclass(frozen=True)
class OCRConfig:
    """
    Optical recognition fallback.

    Attributes:
        enabled: Whether the OCR path may run at all.
        scale: Rendering scale for recognition input (cheaper than reference).
        max_pages: Pages per document that may undergo recognition.
        sparse_token_count: Pages with fewer text tokens than this are
            treated as likely scans and also go through OCR.
        left_margin_ratio: Fraction of bitmap width counted as left margin.
        min_box_height_px: Shortest recognised line box accepted, at OCR scale.
        tall_box_height_px: Box height that earns the tall-box confidence bonus.
        language: Recognition language code.
    """
    enabled: bool = True
    scale: float = 1.2
    max_pages: int = 6
    sparse_token_count: int = 30
    left_margin_ratio: float = 0.25
    min_box_height_px: float = 14.0
    tall_box_height_px: float = 20.0
    language: str = "en"


@dataclass(frozen=True)
class SliceConfig:
    """
    Configuration for slice bounds calculation.

    Attributes:
        top_padding_px: Pixels above a header included in its slice, so
            text sitting slightly above the detected line is kept.
        bottom_gap_px: Pixels left above the next header on the same page.
        min_height_px: Slices shorter than this are dropped as noise.
        dedupe_window_px: Headers closer than this collapse to one.
    """
    top_padding_px: int = 40
    bottom_gap_px: int = 16
    min_height_px: int = 40
    dedupe_window_px: float = 18.0


@dataclass(frozen=True)
class SegmentationConfig:
    """
    Configuration for the question segmentation pipeline.

    Attributes:
        reference_scale: Rendering scale used for slicing; stored question
            coordinates are divided by it (default 1.6).
        placeholder_text: Template for ExtractedQuestion.text.
        layout: Line grouping settings.
        headers: Text-path header policy.
        ocr: OCR fallback settings.
        slicing: Slice bounds settings.
    """
    reference_scale: float = 1.6
    placeholder_text: str = "(Merged question {number})"
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    headers: HeaderConfig = field(default_factory=HeaderConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    slicing: SliceConfig = field(default_factory=SliceConfig)

    def __post_init__(self) -> None:
        if self.reference_scale <= 0:
            raise ValueError(f"reference_scale must be positive: {self.reference_scale}")
        if self.ocr.scale <= 0:
            raise ValueError(f"ocr.scale must be positive: {self.ocr.scale}")
