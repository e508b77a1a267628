"""
Module: segmenter.source

Purpose:
    Document source contract and its PyMuPDF implementation. A document
    source exposes page count, per-page positioned text tokens, per-page
    viewports and per-page bitmap rendering at any scale. The pipeline and
    the crop corrector only ever talk to this contract.

Key Classes:
    - Viewport: Pixel size of a page at a scale
    - DocumentSource: Protocol every source satisfies
    - PyMuPDFDocumentSource: fitz-backed source, owns its document

Key Functions:
    - open_document(): Open a path or byte buffer as a PyMuPDFDocumentSource

Dependencies:
    - fitz (PyMuPDF): PDF access
    - PIL.Image: Rendered bitmaps

Used By:
    - segmenter.pipeline: Drives text extraction and rendering
    - correction.session: Renders pages for manual cropping
    - cli / gui: Open user-supplied PDFs

Thread Safety:
    A fitz document is not safe for concurrent use, so every call into it
    holds the source's lock. Independent sources may be used concurrently.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Union, runtime_checkable

import fitz
from PIL import Image

from exam_toolkit.core.models import PositionedTextToken

from .errors import DocumentOpenError, PageExtractionError
from .utils.pdf import extract_text_tokens, get_page_dimensions, render_page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewport:
    """
    Page size in pixels at a rendering scale.

    Attributes:
        width: Pixel width at ``scale``
        height: Pixel height at ``scale``
        scale: Zoom factor relative to PDF units
    """
    width: float
    height: float
    scale: float

    def to_canvas_y(self, pdf_y: float) -> float:
        """Convert a bottom-up PDF y to a top-down canvas y."""
        return self.height - pdf_y * self.scale

    @property
    def pdf_width(self) -> float:
        """Page width in PDF units."""
        return self.width / self.scale


@runtime_checkable
class DocumentSource(Protocol):
    """Read access to a paginated document. Page numbers are 1-indexed."""

    @property
    def page_count(self) -> int: ...

    def text_tokens(self, page_number: int) -> List[PositionedTextToken]: ...

    def viewport(self, page_number: int, scale: float) -> Viewport: ...

    def render(self, page_number: int, scale: float) -> Image.Image: ...


class PyMuPDFDocumentSource:
    """
    Document source backed by a PyMuPDF document.

    Use open_document() or the from_path/from_bytes constructors; the
    source owns the document and closes it on close() or context exit.

    Example:
        >>> with open_document(Path("exam.pdf")) as source:
        ...     source.page_count
        4
    """

    def __init__(self, doc: fitz.Document, *, name: str = "<memory>"):
        if doc.page_count == 0:
            doc.close()
            raise DocumentOpenError(f"Document has no pages: {name}", source=name)
        self._doc = doc
        self._lock = threading.Lock()
        self.name = name

    @classmethod
    def from_path(cls, path: Path) -> PyMuPDFDocumentSource:
        """
        Open a PDF file.

        Raises:
            FileNotFoundError: If path doesn't exist.
            DocumentOpenError: If the file is not a readable document.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"PDF not found: {path}")
        try:
            doc = fitz.open(path)
        except (RuntimeError, ValueError) as e:
            raise DocumentOpenError(f"Failed to open {path.name}: {e}", source=path.name) from e
        if not doc.is_pdf:
            doc.close()
            raise DocumentOpenError(f"Not a PDF document: {path.name}", source=path.name)
        return cls(doc, name=path.name)

    @classmethod
    def from_bytes(cls, data: bytes, *, name: str = "<memory>") -> PyMuPDFDocumentSource:
        """
        Open a PDF from an in-memory buffer.

        Raises:
            DocumentOpenError: If the buffer is empty or not a PDF.
        """
        if not data:
            raise DocumentOpenError("Empty document buffer", source=name)
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise DocumentOpenError(f"Failed to open {name}: {e}", source=name) from e
        return cls(doc, name=name)

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    @property
    def is_closed(self) -> bool:
        return self._doc.is_closed

    def _page(self, page_number: int) -> fitz.Page:
        if not 1 <= page_number <= self._doc.page_count:
            raise ValueError(f"Page {page_number} out of range 1..{self._doc.page_count}")
        return self._doc[page_number - 1]

    def text_tokens(self, page_number: int) -> List[PositionedTextToken]:
        """
        Positioned text runs of one page.

        Raises:
            PageExtractionError: If PyMuPDF fails to read the text layer.
        """
        with self._lock:
            page = self._page(page_number)
            try:
                return extract_text_tokens(page)
            except (RuntimeError, ValueError) as e:
                raise PageExtractionError(
                    f"Text extraction failed on page {page_number}: {e}",
                    page_number=page_number,
                    cause=e,
                ) from e

    def viewport(self, page_number: int, scale: float) -> Viewport:
        with self._lock:
            width, height = get_page_dimensions(self._page(page_number), scale)
        return Viewport(width=width, height=height, scale=scale)

    def render(self, page_number: int, scale: float) -> Image.Image:
        with self._lock:
            return render_page(self._page(page_number), scale)

    def close(self) -> None:
        with self._lock:
            if not self._doc.is_closed:
                self._doc.close()

    def __enter__(self) -> PyMuPDFDocumentSource:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


PdfInput = Union[Path, str, bytes]


def open_document(pdf: PdfInput, *, name: str | None = None) -> PyMuPDFDocumentSource:
    """
    Open a path or byte buffer as a document source.

    Args:
        pdf: Path (or path string) to a PDF, or the PDF bytes.
        name: Display name for in-memory buffers.

    Raises:
        FileNotFoundError: If a path doesn't exist.
        DocumentOpenError: If the input cannot be parsed as a PDF.
    """
    if isinstance(pdf, (bytes, bytearray)):
        return PyMuPDFDocumentSource.from_bytes(bytes(pdf), name=name or "<memory>")
    return PyMuPDFDocumentSource.from_path(Path(pdf))
