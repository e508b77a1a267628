"""
Crop editor dialog.

Shows one page of the source document with the session's crop rectangle
and its eight resize handles. Mouse drags are forwarded to the
CropSession; the dialog itself holds no geometry state.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPaintEvent, QPen, QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from exam_toolkit.core.models import CropTarget, ExtractedQuestion
from exam_toolkit.correction import MOVE, CropSession, handle_positions, hit_test
from exam_toolkit.segmenter.source import DocumentSource

from .images import pil_to_qpixmap

logger = logging.getLogger(__name__)

RECT_COLOR = QColor("#7c3aed")
RECT_FILL = QColor(124, 58, 237, 30)


class CropCanvas(QWidget):
    """Page bitmap with a draggable crop rectangle."""

    rect_changed = Signal(object)

    HANDLE_SIZE = 8

    def __init__(self, session: CropSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._drag = None
        self._last_pos: Optional[QPointF] = None
        self._pixmap = QPixmap()
        self.refresh_page()

    def refresh_page(self) -> None:
        """Re-read the page bitmap and display size from the session."""
        width = int(round(self.session.display_width))
        height = int(round(self.session.display_height))
        self._pixmap = pil_to_qpixmap(self.session.page_image).scaled(
            width,
            height,
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self.setFixedSize(width, height)
        self.update()

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.drawPixmap(0, 0, self._pixmap)

        r = self.session.rect
        painter.setPen(QPen(RECT_COLOR, 2))
        painter.setBrush(RECT_FILL)
        painter.drawRect(QRectF(r.x, r.y, r.w, r.h))

        s = self.HANDLE_SIZE
        painter.setBrush(RECT_COLOR)
        for hx, hy in handle_positions(r).values():
            painter.drawRect(QRectF(hx - s / 2, hy - s / 2, s, s))
        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        self._drag = hit_test(self.session.rect, pos.x(), pos.y(), radius=self.HANDLE_SIZE)
        self._last_pos = pos

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._drag is None or self._last_pos is None:
            return
        pos = event.position()
        if self._drag == MOVE:
            self.session.move(pos.x() - self._last_pos.x(), pos.y() - self._last_pos.y())
        else:
            self.session.drag_handle(self._drag, pos.x(), pos.y())
        self._last_pos = pos
        self.rect_changed.emit(self.session.rect)
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._drag = None
        self._last_pos = None


class CropEditorDialog(QDialog):
    """
    Modal crop correction for one extracted question or answer.

    After exec(), ``result_item`` holds the corrected item when the
    operator saved, and None when they cancelled.
    """

    MAX_DISPLAY_WIDTH = 800

    def __init__(
        self,
        source: DocumentSource,
        item: ExtractedQuestion,
        *,
        target: CropTarget = CropTarget.QUESTION,
        render_scale: float = 1.6,
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle(f"Fix Crop - {item.title}")
        self.session = CropSession(source, item, target=target, render_scale=render_scale)
        self._fit_display()
        self.result_item: Optional[ExtractedQuestion] = None

        layout = QVBoxLayout(self)

        # Page selector
        top_row = QHBoxLayout()
        top_row.addWidget(QLabel("Page"))
        self.page_spin = QSpinBox()
        self.page_spin.setRange(1, source.page_count)
        self.page_spin.setValue(self.session.page_number)
        self.page_spin.valueChanged.connect(self._on_page_changed)
        top_row.addWidget(self.page_spin)
        top_row.addStretch()
        self.slice_label = QLabel()
        top_row.addWidget(self.slice_label)
        layout.addLayout(top_row)

        self.canvas = CropCanvas(self.session)
        scroll = QScrollArea()
        scroll.setWidget(self.canvas)
        scroll.setWidgetResizable(False)
        layout.addWidget(scroll, stretch=1)

        btn_row = QHBoxLayout()
        self.add_slice_btn = QPushButton("Add Slice")
        self.add_slice_btn.clicked.connect(self._on_add_slice)
        self.clear_slices_btn = QPushButton("Clear Slices")
        self.clear_slices_btn.clicked.connect(self._on_clear_slices)
        self.save_btn = QPushButton("Save Crop")
        self.save_btn.setDefault(True)
        self.save_btn.clicked.connect(self._on_save)
        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.clicked.connect(self.reject)
        for btn in (self.add_slice_btn, self.clear_slices_btn):
            btn_row.addWidget(btn)
        btn_row.addStretch()
        for btn in (self.cancel_btn, self.save_btn):
            btn_row.addWidget(btn)
        layout.addLayout(btn_row)

        self._update_slice_label()

    def _fit_display(self) -> None:
        width, height = self.session.page_image.size
        factor = min(1.0, self.MAX_DISPLAY_WIDTH / width)
        self.session.set_display_size(width * factor, height * factor)

    def _update_slice_label(self) -> None:
        self.slice_label.setText(f"Slices: {len(self.session.slices)}")

    def _on_page_changed(self, page_number: int) -> None:
        if not self.session.is_open or page_number == self.session.page_number:
            return
        self.session.change_page(page_number)
        self.canvas.refresh_page()

    def _on_add_slice(self) -> None:
        self.session.add_slice()
        self._update_slice_label()

    def _on_clear_slices(self) -> None:
        self.session.clear_slices()
        self._update_slice_label()

    def _on_save(self) -> None:
        self.result_item = self.session.save()
        self.accept()

    def reject(self) -> None:
        if self.session.is_open:
            self.session.cancel()
        super().reject()
