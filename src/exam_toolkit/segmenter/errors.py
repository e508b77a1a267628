"""Error taxonomy for question segmentation.

Only DocumentOpenError escapes a pipeline run. The per-page errors are
raised inside the page loop, caught there and recorded in diagnostics.
"""

from __future__ import annotations

from typing import Optional


class SegmentationError(Exception):
    """Base class for segmentation failures."""


class DocumentOpenError(SegmentationError):
    """The input cannot be parsed as a document at all (fatal)."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class PageError(SegmentationError):
    """Failure confined to one page (recovered)."""

    def __init__(self, message: str, page_number: int, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.page_number = page_number
        self.cause = cause


class PageExtractionError(PageError):
    """Text-token retrieval failed for one page; OCR may still run."""


class PageRecognitionError(PageError):
    """Optical recognition failed for one page; the page contributes nothing."""
