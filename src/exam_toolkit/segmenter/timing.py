"""
Module: segmenter.timing

Purpose:
    Timing instrumentation for the segmentation pipeline, to see which
    phase (text detection, OCR, rendering, slicing) dominates a run.

Key Classes:
    - TimingLog: Collects document-level and per-page phase timings

Key Functions:
    - timed_phase: Context manager for timing code blocks

Used By:
    - segmenter.pipeline
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Timing metrics for one segmentation run.

    Attributes:
        document_timings: phase_name -> duration_seconds
        page_timings: page_number -> {phase_name -> duration_seconds}

    Example:
        >>> log = TimingLog()
        >>> log.log_document("open", 0.012)
        >>> log.log_page(3, "ocr_detect", 1.84)
        >>> print(log.summary())
    """
    document_timings: Dict[str, float] = field(default_factory=dict)
    page_timings: Dict[int, Dict[str, float]] = field(default_factory=dict)

    def log_document(self, phase: str, duration: float) -> None:
        self.document_timings[phase] = duration

    def log_page(self, page_number: int, phase: str, duration: float) -> None:
        # Phases may repeat on a page (e.g. two renders); durations add up
        phases = self.page_timings.setdefault(page_number, {})
        phases[phase] = phases.get(phase, 0.0) + duration

    def get_page_total(self, page_number: int) -> float:
        return sum(self.page_timings.get(page_number, {}).values())

    def get_phase_totals(self) -> Dict[str, float]:
        """Sum each phase across all pages."""
        totals: Dict[str, float] = {}
        for phases in self.page_timings.values():
            for phase, duration in phases.items():
                totals[phase] = totals.get(phase, 0.0) + duration
        return totals

    def get_slowest_pages(self, n: int = 3) -> List[Tuple[int, float, str, float]]:
        """Get the N slowest pages with their total time and slowest phase."""
        results = []
        for page_number, phases in self.page_timings.items():
            if not phases:
                continue
            slowest_phase = max(phases.items(), key=lambda x: x[1])
            results.append((page_number, sum(phases.values()), slowest_phase[0], slowest_phase[1]))

        results.sort(key=lambda x: x[1], reverse=True)
        return results[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["", "=== Segmentation Timing Summary ==="]

        if self.document_timings:
            lines.append("Document-level:")
            for phase, duration in sorted(self.document_timings.items()):
                lines.append(f"  {phase:25s} {duration:.3f}s")

        totals = self.get_phase_totals()
        if totals:
            lines.append("")
            lines.append("Page phases (total):")
            for phase, total in sorted(totals.items(), key=lambda x: -x[1]):
                lines.append(f"  {phase:25s} {total:.3f}s")

        slowest = self.get_slowest_pages(3)
        if slowest:
            lines.append("")
            lines.append("Slowest pages:")
            for page_number, total, slow_phase, slow_duration in slowest:
                lines.append(f"  page {page_number}: {total:.3f}s ({slow_phase}: {slow_duration:.3f}s)")

        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_timings": self.document_timings,
            "page_timings": {str(k): v for k, v in self.page_timings.items()},
            "phase_totals": self.get_phase_totals(),
            "slowest_pages": [
                {"page": page, "total": total, "slowest_phase": phase, "phase_duration": dur}
                for page, total, phase, dur in self.get_slowest_pages(5)
            ],
        }

    def save(self, path: Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved timing data to {path}")


@contextmanager
def timed_phase(
    log: TimingLog,
    phase: str,
    page_number: Optional[int] = None,
) -> Generator[None, None, None]:
    """
    Context manager for timing a code phase.

    Args:
        log: TimingLog instance to record metrics
        phase: Name of the phase being timed
        page_number: If provided, records as a page-level metric;
                     otherwise records as a document-level metric

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "text_detect", page_number=1):
        ...     headers = detect_text_headers(lines, viewport, median_font=10)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if page_number is not None:
            log.log_page(page_number, phase, elapsed)
        else:
            log.log_document(phase, elapsed)
