"""
In-memory stand-ins for a document source, a recognition engine and a
question sink, plus small builders for tokens and recognised lines.

Pages render as flat grey images whose shade depends on the page number,
so tests can tell which page a slice came from.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import fitz
from PIL import Image

from exam_toolkit.core.models import PositionedTextToken
from exam_toolkit.persistence import QuestionRecord
from exam_toolkit.segmenter.errors import PageExtractionError
from exam_toolkit.segmenter.ocr import RecognizedLine
from exam_toolkit.segmenter.source import Viewport

PAGE_WIDTH = 600
PAGE_HEIGHT = 800


def page_shade(page_number: int) -> int:
    return 250 - page_number * 10


def header_token(text: str, canvas_y: float, *, x: float = 50.0, size: float = 12.0,
                 page_height: float = PAGE_HEIGHT) -> PositionedTextToken:
    """Token whose line lands at ``canvas_y`` when laid out at scale 1.0."""
    return PositionedTextToken(text=text, x=x, y=page_height - canvas_y, font_height=size)


def body_tokens(count: int, canvas_y: float, *, size: float = 10.0,
                page_height: float = PAGE_HEIGHT) -> List[PositionedTextToken]:
    """``count`` plain words on one line."""
    return [
        PositionedTextToken(text="word", x=50.0 + i * 15, y=page_height - canvas_y, font_height=size)
        for i in range(count)
    ]


def ocr_line(text: str, top: float, *, x0: float = 30.0, height: float = 30.0, width: float = 170.0) -> RecognizedLine:
    return RecognizedLine(text=text, bbox=(x0, top, x0 + width, top + height), confidence=0.9)


class FakeDocumentSource:
    """DocumentSource over a list of per-page token lists."""

    def __init__(
        self,
        pages: Sequence[Sequence[PositionedTextToken]],
        *,
        width: float = PAGE_WIDTH,
        height: float = PAGE_HEIGHT,
        failing_pages: Iterable[int] = (),
        name: str = "fake.pdf",
    ):
        self.pages = [list(tokens) for tokens in pages]
        self.width = width
        self.height = height
        self.failing_pages = set(failing_pages)
        self.name = name
        self.render_calls: List[Tuple[int, float]] = []
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def text_tokens(self, page_number: int) -> List[PositionedTextToken]:
        if page_number in self.failing_pages:
            raise PageExtractionError(f"broken text layer on page {page_number}", page_number=page_number)
        return list(self.pages[page_number - 1])

    def viewport(self, page_number: int, scale: float) -> Viewport:
        return Viewport(width=self.width * scale, height=self.height * scale, scale=scale)

    def render(self, page_number: int, scale: float) -> Image.Image:
        self.render_calls.append((page_number, scale))
        size = (int(round(self.width * scale)), int(round(self.height * scale)))
        shade = page_shade(page_number)
        return Image.new("RGB", size, (shade, shade, shade))

    def close(self) -> None:
        self.closed = True


class FakeRecognizer:
    """RecognitionEngine returning scripted lines per call, or raising."""

    def __init__(self, lines_by_call: Optional[Sequence[Sequence[RecognizedLine]]] = None,
                 error: Optional[Exception] = None):
        self.lines_by_call = [list(lines) for lines in (lines_by_call or [])]
        self.error = error
        self.images: List[Image.Image] = []

    @property
    def calls(self) -> int:
        return len(self.images)

    def recognize(self, image: Image.Image) -> List[RecognizedLine]:
        self.images.append(image)
        if self.error is not None:
            raise self.error
        index = len(self.images) - 1
        if index < len(self.lines_by_call):
            return list(self.lines_by_call[index])
        return []


class RecordingSink:
    """QuestionSink that keeps everything in memory."""

    def __init__(self):
        self.records: List[QuestionRecord] = []
        self.answers: Dict[str, Image.Image] = {}

    def save_question(self, record: QuestionRecord) -> str:
        self.records.append(record)
        return f"mem://q{record.order}"

    def save_answer(self, question_id: str, image: Image.Image) -> str:
        self.answers[question_id] = image
        return f"mem://{question_id}/answer"


def make_pdf_bytes(pages: Sequence[Sequence[Tuple[float, float, str, float]]]) -> bytes:
    """
    Build a real PDF with PyMuPDF.

    Args:
        pages: Per page, (x, baseline_y, text, font_size) with y top-down.
    """
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page(width=595, height=842)
        for x, y, text, size in lines:
            page.insert_text((x, y), text, fontsize=size)
    data = doc.tobytes()
    doc.close()
    return data
