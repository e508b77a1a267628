"""
Module: segmenter.detection

Purpose:
    Detection subpackage for identifying question/answer headers on a page.
    Two interchangeable detectors share one output contract (DetectedHeader).

Key Modules:
    - patterns: Keyword, dotted and bare numeric header regexes
    - text_headers: Header detection from the PDF text layer
    - ocr_headers: Header detection from recognised lines of a bitmap
    - dedupe: Per-page deduplication by number and by position

Used By:
    - segmenter.pipeline: Orchestrates detection modules
"""

from .dedupe import dedupe_headers
from .ocr_headers import detect_ocr_headers
from .patterns import HeaderKind, HeaderMatch, match_header_number
from .text_headers import detect_text_headers, is_header_like

__all__ = [
    "HeaderKind",
    "HeaderMatch",
    "dedupe_headers",
    "detect_ocr_headers",
    "detect_text_headers",
    "is_header_like",
    "match_header_number",
]
