"""
Module: segmenter.diagnostics

Captures recovered problems during segmentation (failed pages, skipped
regions, OCR cap hits) and generates a diagnostics report for analysis.

Nothing recorded here aborts a run: the pipeline logs a warning, records
the issue and moves on to the next page.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

PAGE_EXTRACTION_ERROR = "page_extraction_error"
PAGE_RECOGNITION_ERROR = "page_recognition_error"
DEGENERATE_REGION = "degenerate_region"
OCR_CAP_REACHED = "ocr_cap_reached"
NO_QUESTIONS = "no_questions"


@dataclass
class SegmentationIssue:
    """
    A single recovered issue with diagnostic context.

    Fields:
    - page_number: 1-indexed page, 0 for document-level issues
    - question_number: Affected question if known
    - details: Free-form extra context (bounds, error class, counters)
    """
    issue_type: str
    document_name: str
    page_number: int
    message: str
    question_number: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "issue_type": self.issue_type,
            "document": self.document_name,
            "page": self.page_number,
            "message": self.message,
        }
        if self.question_number is not None:
            d["question_number"] = self.question_number
        if self.details:
            d["details"] = self.details
        return d


class DiagnosticsCollector:
    """
    Thread-safe collector for segmentation issues.

    One collector per pipeline run. Callers add issues with all context
    already formatted.
    """

    def __init__(self, document_name: str = ""):
        self.document_name = document_name
        self._issues: List[SegmentationIssue] = []
        self._lock = threading.Lock()

    def _add(self, issue: SegmentationIssue) -> None:
        with self._lock:
            self._issues.append(issue)

    def add_page_extraction_error(self, page_number: int, error: BaseException) -> None:
        """Record a page whose text tokens could not be read."""
        self._add(SegmentationIssue(
            issue_type=PAGE_EXTRACTION_ERROR,
            document_name=self.document_name,
            page_number=page_number,
            message=f"Page {page_number}: text extraction failed: {error}",
            details={"error": type(error).__name__},
        ))

    def add_page_recognition_error(self, page_number: int, error: BaseException) -> None:
        """Record a page where OCR (or its rendering) failed."""
        self._add(SegmentationIssue(
            issue_type=PAGE_RECOGNITION_ERROR,
            document_name=self.document_name,
            page_number=page_number,
            message=f"Page {page_number}: OCR failed: {error}",
            details={"error": type(error).__name__},
        ))

    def add_degenerate_region(self, page_number: int, question_number: int, top: int, bottom: int) -> None:
        """Record a slice band dropped for being too short."""
        self._add(SegmentationIssue(
            issue_type=DEGENERATE_REGION,
            document_name=self.document_name,
            page_number=page_number,
            question_number=question_number,
            message=f"Q{question_number} on page {page_number}: region {top}-{bottom} too short, skipped",
            details={"top": top, "bottom": bottom},
        ))

    def add_ocr_cap_reached(self, page_number: int, max_pages: int) -> None:
        """Record a page that wanted OCR after the per-document budget ran out."""
        self._add(SegmentationIssue(
            issue_type=OCR_CAP_REACHED,
            document_name=self.document_name,
            page_number=page_number,
            message=f"Page {page_number}: OCR skipped, budget of {max_pages} pages used",
            details={"max_pages": max_pages},
        ))

    def add_no_questions(self, page_count: int) -> None:
        self._add(SegmentationIssue(
            issue_type=NO_QUESTIONS,
            document_name=self.document_name,
            page_number=0,
            message=f"No question headers detected in {page_count} page(s)",
        ))

    def issues_of_type(self, issue_type: str) -> List[SegmentationIssue]:
        with self._lock:
            return [i for i in self._issues if i.issue_type == issue_type]

    def generate_report(self) -> "SegmentationDiagnosticsReport":
        with self._lock:
            return SegmentationDiagnosticsReport.from_issues(self.document_name, list(self._issues))

    @property
    def issue_count(self) -> int:
        with self._lock:
            return len(self._issues)


@dataclass
class SegmentationDiagnosticsReport:
    """Complete diagnostics report for one document."""
    generated_at: str
    document_name: str
    total_issues: int
    summary_by_type: Dict[str, int]
    issues: List[SegmentationIssue]

    @classmethod
    def from_issues(cls, document_name: str, issues: List[SegmentationIssue]) -> "SegmentationDiagnosticsReport":
        summary_by_type: Dict[str, int] = {}
        for issue in issues:
            summary_by_type[issue.issue_type] = summary_by_type.get(issue.issue_type, 0) + 1

        return cls(
            generated_at=datetime.now(timezone.utc).isoformat(),
            document_name=document_name,
            total_issues=len(issues),
            summary_by_type=summary_by_type,
            issues=issues,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "document": self.document_name,
            "total_issues": self.total_issues,
            "summary_by_type": self.summary_by_type,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")
        logger.info(f"Segmentation diagnostics saved: {path}")
