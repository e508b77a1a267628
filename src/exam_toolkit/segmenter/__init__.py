"""
Module: segmenter

Purpose:
    Question segmentation pipeline. Splits an exam question paper (or memo)
    PDF into one image per question by locating question headers on each
    page, slicing the rendered page between them and merging slices of the
    same question across pages.

Key Functions:
    - segment_question_paper(): Main entry point (path or bytes)
    - segment_document(): Segment an already opened DocumentSource
    - open_document(): Open a PDF as a DocumentSource

Key Classes:
    - SegmentationConfig: Every tunable constant of the pipeline
    - SegmentationResult: Questions plus warnings, diagnostics and timing

Dependencies:
    - fitz (PyMuPDF): PDF access and rendering
    - PIL: Bitmaps and stitching
    - numpy: Layout statistics, OCR input
    - easyocr (optional): Recognition on scanned pages

Example:
    >>> from exam_toolkit.segmenter import segment_question_paper
    >>> result = segment_question_paper(Path("exam.pdf"))
    >>> print(f"Found {len(result.questions)} questions")
"""

from .config import (
    HeaderConfig,
    LayoutConfig,
    OCRConfig,
    SegmentationConfig,
    SliceConfig,
)
from .errors import (
    DocumentOpenError,
    PageExtractionError,
    PageRecognitionError,
    SegmentationError,
)
from .ocr import EasyOCREngine, RecognitionEngine, RecognizedLine
from .pipeline import (
    ParseState,
    SegmentationResult,
    SegmentationRun,
    segment_document,
    segment_question_paper,
)
from .source import DocumentSource, PyMuPDFDocumentSource, Viewport, open_document

__all__ = [
    "DocumentOpenError",
    "DocumentSource",
    "EasyOCREngine",
    "HeaderConfig",
    "LayoutConfig",
    "OCRConfig",
    "PageExtractionError",
    "PageRecognitionError",
    "ParseState",
    "PyMuPDFDocumentSource",
    "RecognitionEngine",
    "RecognizedLine",
    "SegmentationConfig",
    "SegmentationError",
    "SegmentationResult",
    "SegmentationRun",
    "SliceConfig",
    "Viewport",
    "open_document",
    "segment_document",
    "segment_question_paper",
]
