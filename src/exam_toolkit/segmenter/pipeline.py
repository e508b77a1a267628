"""
Module: segmenter.pipeline

Purpose:
    Parse orchestrator for question-paper segmentation. Walks the pages of
    a document, detects question headers from the text layer (falling back
    to optical recognition on scanned or header-less pages), slices each
    page at the headers and merges slices of the same question number
    across pages into one ExtractedQuestion.

Key Functions:
    - segment_document(): Segment an already opened DocumentSource
    - segment_question_paper(): Open a path or byte buffer and segment it

Key Classes:
    - ParseState: Orchestrator states
    - SegmentationResult: Container for segmentation output
    - SegmentationRun: One run over one document (owns its accumulators)

Dependencies:
    - segmenter.source: Page tokens, viewports and bitmaps
    - segmenter.layout / detection / ocr: Header detection
    - segmenter.slicing: Bounds, accumulation and stitching

Used By:
    - cli: `exam-toolkit segment`
    - gui.review_window: Background segmentation of a chosen PDF

Failure Semantics:
    Only DocumentOpenError escapes. Text-extraction errors make the page
    count as having no text headers (OCR may still run). Recognition errors
    make the OCR path contribute nothing for that page. Both are logged at
    WARNING and recorded in diagnostics.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from exam_toolkit.core.models import DetectedHeader, ExtractedQuestion, PositionedTextToken

from .config import SegmentationConfig
from .detection import dedupe_headers, detect_ocr_headers, detect_text_headers
from .diagnostics import DiagnosticsCollector, SegmentationDiagnosticsReport
from .errors import PageExtractionError, PageRecognitionError
from .layout import group_tokens_into_lines, median_font_height
from .ocr import EasyOCREngine, RecognitionEngine, easyocr_available
from .slicing import QuestionAccumulatorMap, calculate_page_bounds
from .source import DocumentSource, PdfInput, open_document
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class ParseState(str, Enum):
    """States of one orchestrator run."""
    IDLE = "idle"
    PAGE_LOOP = "page_loop"
    TEXT_DETECT = "text_detect"
    OCR_DETECT = "ocr_detect"
    RENDER = "render"
    SLICE = "slice"
    DONE = "done"


@dataclass
class SegmentationResult:
    """
    Result of segmenting one document.

    Attributes:
        questions: One ExtractedQuestion per distinct number, ascending.
        warnings: Human-readable warnings (recovered failures, empty result).
        pages_processed: Pages the loop visited.
        ocr_pages_used: Pages that went through optical recognition.
        cancelled: True if the run stopped early on request; questions
            then hold whatever was accumulated before the stop.
        diagnostics: Report of recovered issues.
        timing: Per-phase timings.
    """
    questions: List[ExtractedQuestion]
    warnings: List[str] = field(default_factory=list)
    pages_processed: int = 0
    ocr_pages_used: int = 0
    cancelled: bool = False
    diagnostics: Optional[SegmentationDiagnosticsReport] = None
    timing: TimingLog = field(default_factory=TimingLog)

    @property
    def is_empty(self) -> bool:
        return not self.questions

    @property
    def question_numbers(self) -> List[int]:
        return [q.number for q in self.questions]


def _noop_progress(message: str) -> None:
    pass


class SegmentationRun:
    """
    One pass of the orchestrator over one document.

    A run is single-use and owns its accumulator map; nothing is shared
    between runs, so separate documents may be segmented concurrently with
    separate runs.

    Example:
        >>> run = SegmentationRun(source, config=SegmentationConfig(), recognizer=None)
        >>> result = run.execute()
        >>> run.state
        <ParseState.DONE: 'done'>
    """

    def __init__(
        self,
        source: DocumentSource,
        *,
        config: SegmentationConfig,
        recognizer: Optional[RecognitionEngine],
        progress: ProgressCallback = _noop_progress,
        cancel: Optional[threading.Event] = None,
    ):
        self.source = source
        self.config = config
        self.recognizer = recognizer
        self.progress = progress
        self.cancel = cancel
        self.state = ParseState.IDLE
        self.document_name = getattr(source, "name", "<document>")

        self.accumulators = QuestionAccumulatorMap(config.reference_scale)
        self.diagnostics = DiagnosticsCollector(self.document_name)
        self.timing = TimingLog()
        self.warnings: List[str] = []
        self.ocr_pages_used = 0
        self.pages_processed = 0

    def _enter(self, state: ParseState) -> None:
        self.state = state

    def execute(self) -> SegmentationResult:
        """
        Run the page loop to completion (or until cancelled).

        Raises:
            RuntimeError: If the run was already executed.
        """
        if self.state is not ParseState.IDLE:
            raise RuntimeError("SegmentationRun instances are single-use")

        total = self.source.page_count
        cancelled = False

        with timed_phase(self.timing, "page_loop"):
            for page_number in range(1, total + 1):
                if self.cancel is not None and self.cancel.is_set():
                    logger.info(f"Segmentation of {self.document_name} cancelled before page {page_number}")
                    self.warnings.append(f"Cancelled after {self.pages_processed} of {total} pages")
                    cancelled = True
                    break

                self._enter(ParseState.PAGE_LOOP)
                self.progress(f"Processing Page {page_number} of {total}...")
                self._process_page(page_number)
                self.pages_processed += 1

        with timed_phase(self.timing, "finalize"):
            questions = self.accumulators.finalize(self.config.placeholder_text)
        self._enter(ParseState.DONE)

        if not questions and not cancelled:
            self.warnings.append("No questions detected in PDF")
            self.diagnostics.add_no_questions(total)
            logger.warning(
                f"No question headers detected in {self.document_name}",
                extra={"document": self.document_name, "page_count": total},
            )

        logger.info(
            f"Segmented {self.document_name}: {len(questions)} questions from "
            f"{self.pages_processed}/{total} pages ({self.ocr_pages_used} via OCR)",
            extra={
                "document": self.document_name,
                "question_count": len(questions),
                "ocr_pages_used": self.ocr_pages_used,
            },
        )
        if self.diagnostics.issue_count:
            logger.info(f"Segmentation diagnostics: {self.diagnostics.issue_count} issues recorded")

        return SegmentationResult(
            questions=questions,
            warnings=self.warnings,
            pages_processed=self.pages_processed,
            ocr_pages_used=self.ocr_pages_used,
            cancelled=cancelled,
            diagnostics=self.diagnostics.generate_report(),
            timing=self.timing,
        )

    def _process_page(self, page_number: int) -> None:
        self._enter(ParseState.TEXT_DETECT)
        with timed_phase(self.timing, "text_detect", page_number=page_number):
            tokens, text_headers = self._detect_text_headers(page_number)

        ocr_headers: List[DetectedHeader] = []
        if self._wants_ocr(tokens, text_headers):
            if self.ocr_pages_used < self.config.ocr.max_pages:
                self._enter(ParseState.OCR_DETECT)
                with timed_phase(self.timing, "ocr_detect", page_number=page_number):
                    ocr_headers = self._detect_ocr_headers(page_number)
            else:
                logger.debug(f"Page {page_number}: OCR budget exhausted, skipping recognition")
                self.diagnostics.add_ocr_cap_reached(page_number, self.config.ocr.max_pages)

        headers = dedupe_headers(text_headers + ocr_headers, self.config.slicing.dedupe_window_px)
        if not headers:
            logger.debug(f"Page {page_number}: no headers, page contributes nothing")
            return

        self._enter(ParseState.RENDER)
        with timed_phase(self.timing, "render", page_number=page_number):
            page_image = self.source.render(page_number, self.config.reference_scale)

        self._enter(ParseState.SLICE)
        with timed_phase(self.timing, "slice", page_number=page_number):
            page_bounds = calculate_page_bounds(headers, page_image.height, self.config.slicing)
            for skipped in page_bounds.skipped:
                self.diagnostics.add_degenerate_region(
                    page_number, skipped.question_number, skipped.top, skipped.bottom
                )
            for bounds in page_bounds.bounds:
                self.accumulators.add_slice(page_image, bounds, page_number=page_number)

        numbers = [b.question_number for b in page_bounds.bounds]
        logger.debug(f"Page {page_number}: {len(numbers)} slices {numbers}")

    def _detect_text_headers(self, page_number: int) -> tuple[List[PositionedTextToken], List[DetectedHeader]]:
        try:
            tokens = self.source.text_tokens(page_number)
            if not tokens:
                return tokens, []
            viewport = self.source.viewport(page_number, self.config.reference_scale)
            lines = group_tokens_into_lines(tokens, viewport, self.config.layout)
            median = median_font_height(tokens, self.config.layout.default_font_height)
            headers = detect_text_headers(lines, viewport, median_font=median, config=self.config.headers)
        except Exception as e:
            error = e if isinstance(e, PageExtractionError) else PageExtractionError(
                str(e), page_number=page_number, cause=e
            )
            msg = f"Text extraction failed on page {page_number} of {self.document_name}: {e}"
            logger.warning(msg, extra={"document": self.document_name, "page_number": page_number})
            self.warnings.append(msg)
            self.diagnostics.add_page_extraction_error(page_number, error)
            return [], []

        return tokens, headers

    def _wants_ocr(self, tokens: List[PositionedTextToken], text_headers: List[DetectedHeader]) -> bool:
        if self.recognizer is None or not self.config.ocr.enabled:
            return False
        return not text_headers or len(tokens) < self.config.ocr.sparse_token_count

    def _detect_ocr_headers(self, page_number: int) -> List[DetectedHeader]:
        ocr = self.config.ocr
        # Counts attempts, not successes: a failing page still spends budget
        self.ocr_pages_used += 1
        self.progress(f"OCR Page {page_number}... ({self.ocr_pages_used}/{ocr.max_pages})")

        try:
            bitmap = self.source.render(page_number, ocr.scale)
            lines = self.recognizer.recognize(bitmap)
        except Exception as e:
            error = PageRecognitionError(str(e), page_number=page_number, cause=e)
            msg = f"OCR failed on page {page_number} of {self.document_name}: {e}"
            logger.warning(
                msg,
                extra={"document": self.document_name, "page_number": page_number, "error": str(e)},
            )
            self.warnings.append(msg)
            self.diagnostics.add_page_recognition_error(page_number, error)
            return []

        return detect_ocr_headers(
            lines,
            bitmap_width=bitmap.width,
            reference_scale=self.config.reference_scale,
            config=ocr,
        )


def _default_recognizer(config: SegmentationConfig) -> Optional[RecognitionEngine]:
    if not config.ocr.enabled or not easyocr_available():
        return None
    return EasyOCREngine(languages=(config.ocr.language,))


def segment_document(
    source: DocumentSource,
    *,
    config: Optional[SegmentationConfig] = None,
    recognizer: Optional[RecognitionEngine] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
) -> SegmentationResult:
    """
    Segment an opened document into questions.

    Pipeline per page:
    1. Group text tokens into lines, detect text headers
    2. If the page has no text headers or is sparse, run OCR detection
       (at most config.ocr.max_pages pages per document)
    3. Deduplicate headers, render the page at the reference scale
    4. Slice between headers and merge slices by question number

    Args:
        source: Opened document source. Not closed by this function.
        config: Optional segmentation configuration.
        recognizer: OCR engine. Defaults to an EasyOCREngine when OCR is
            enabled in config and easyocr is installed.
        progress: Receives human-readable status strings.
        cancel: Checked between pages; when set the run stops early.

    Returns:
        SegmentationResult with questions sorted by number.

    Example:
        >>> with open_document(Path("exam.pdf")) as source:
        ...     result = segment_document(source, progress=print)
        Processing Page 1 of 4...
        >>> [q.number for q in result.questions]
        [1, 2, 3]
    """
    config = config or SegmentationConfig()
    if recognizer is None:
        recognizer = _default_recognizer(config)
    run = SegmentationRun(
        source,
        config=config,
        recognizer=recognizer,
        progress=progress or _noop_progress,
        cancel=cancel,
    )
    return run.execute()


def segment_question_paper(
    pdf: PdfInput,
    *,
    config: Optional[SegmentationConfig] = None,
    recognizer: Optional[RecognitionEngine] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
) -> SegmentationResult:
    """
    Open a PDF path or byte buffer and segment it.

    Raises:
        FileNotFoundError: If a path doesn't exist.
        DocumentOpenError: If the input cannot be parsed as a PDF.
    """
    timing = TimingLog()
    with timed_phase(timing, "open"):
        source = open_document(pdf)
    with source:
        result = segment_document(
            source, config=config, recognizer=recognizer, progress=progress, cancel=cancel
        )
    result.timing.document_timings.update(timing.document_timings)
    return result
