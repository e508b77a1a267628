"""
Review window: segment a question paper, review and fix the extracted
questions, then commit them to a folder.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QSize, Signal, Slot
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QDoubleSpinBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from exam_toolkit.core.models import CropTarget, ExtractedQuestion
from exam_toolkit.persistence import DirectorySink, QuestionSink, commit_answers, commit_questions
from exam_toolkit.segmenter import (
    DocumentOpenError,
    SegmentationConfig,
    SegmentationResult,
    open_document,
    segment_document,
)
from exam_toolkit.segmenter.ocr import RecognitionEngine
from exam_toolkit.segmenter.source import DocumentSource

from .crop_editor import CropEditorDialog
from .images import thumbnail_pixmap
from .logging_utils import attach_status_handler, detach_status_handler

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No questions detected. Check the source file or add questions manually."


class ReviewWindow(QMainWindow):
    # Signals carry worker-thread results to the GUI thread
    progress_message = Signal(str)
    # result, error message
    segmentation_finished = Signal(object, object)

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        recognizer: Optional[RecognitionEngine] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Exam Toolkit - Question Review")
        self.resize(900, 700)
        self.config = config or SegmentationConfig()
        self.recognizer = recognizer

        self.source: Optional[DocumentSource] = None
        self.questions: List[ExtractedQuestion] = []
        self.target = CropTarget.QUESTION
        self._cancel_event: Optional[threading.Event] = None
        self._worker: Optional[threading.Thread] = None

        central = QWidget()
        layout = QHBoxLayout(central)

        # Left: question list
        left = QVBoxLayout()
        self.open_btn = QPushButton("Open PDF...")
        self.open_btn.clicked.connect(self._on_open_clicked)
        left.addWidget(self.open_btn)
        self.cancel_btn = QPushButton("Stop")
        self.cancel_btn.setEnabled(False)
        self.cancel_btn.clicked.connect(self.cancel_segmentation)
        left.addWidget(self.cancel_btn)
        self.question_list = QListWidget()
        self.question_list.setIconSize(QSize(160, 120))
        self.question_list.currentRowChanged.connect(self._on_selection_changed)
        left.addWidget(self.question_list, stretch=1)
        self.empty_label = QLabel(EMPTY_MESSAGE)
        self.empty_label.setWordWrap(True)
        self.empty_label.setVisible(False)
        left.addWidget(self.empty_label)
        layout.addLayout(left, stretch=1)

        # Right: item actions
        right = QVBoxLayout()
        right.addWidget(QLabel("Marks"))
        self.marks_spin = QDoubleSpinBox()
        self.marks_spin.setRange(0, 1000)
        self.marks_spin.setDecimals(1)
        self.marks_spin.valueChanged.connect(self._on_marks_changed)
        right.addWidget(self.marks_spin)
        self.fix_crop_btn = QPushButton("Fix Crop...")
        self.fix_crop_btn.clicked.connect(self._on_fix_crop_clicked)
        right.addWidget(self.fix_crop_btn)
        self.remove_btn = QPushButton("Remove")
        self.remove_btn.clicked.connect(self._on_remove_clicked)
        right.addWidget(self.remove_btn)
        right.addStretch()
        self.commit_btn = QPushButton("Commit to Folder...")
        self.commit_btn.clicked.connect(self._on_commit_clicked)
        right.addWidget(self.commit_btn)
        self.memo_btn = QPushButton("Attach as Memo Answers...")
        self.memo_btn.clicked.connect(self._on_memo_clicked)
        right.addWidget(self.memo_btn)
        layout.addLayout(right)

        self.setCentralWidget(central)

        self.log_handler = attach_status_handler()
        self.log_handler.bridge.record_emitted.connect(self._on_log_record)
        self.progress_message.connect(self._show_status)
        self.segmentation_finished.connect(self._handle_segmentation_finished)

        self._update_actions()

    # -- segmentation ----------------------------------------------------

    def start_segmentation(self, pdf_path: Path) -> bool:
        """
        Open ``pdf_path`` and segment it on a worker thread.

        Returns:
            False if the file could not be opened (the error is shown).
        """
        try:
            source = open_document(pdf_path)
        except (DocumentOpenError, FileNotFoundError) as e:
            logger.error(f"Could not open {pdf_path}: {e}")
            QMessageBox.critical(self, "Invalid File", f"Could not open {Path(pdf_path).name}:\n{e}")
            return False

        self._set_source(source)
        self.set_questions([])
        self._cancel_event = threading.Event()
        self._set_busy(True)

        def _run(cancel: threading.Event) -> None:
            try:
                result = segment_document(
                    source,
                    config=self.config,
                    recognizer=self.recognizer,
                    progress=self.progress_message.emit,
                    cancel=cancel,
                )
                self.segmentation_finished.emit(result, None)
            except Exception as e:
                logger.exception("Segmentation failed")
                self.segmentation_finished.emit(None, str(e))

        self._worker = threading.Thread(target=_run, args=(self._cancel_event,), daemon=True)
        self._worker.start()
        return True

    def cancel_segmentation(self) -> None:
        if self._cancel_event is not None:
            self._cancel_event.set()

    @Slot(object, object)
    def _handle_segmentation_finished(self, result: Optional[SegmentationResult], error: Optional[str]) -> None:
        self._set_busy(False)
        if error is not None:
            QMessageBox.critical(self, "Segmentation Failed", error)
            return
        self.load_result(result)

    def load_result(self, result: SegmentationResult) -> None:
        self.set_questions(result.questions)
        if result.cancelled:
            self._show_status(f"Stopped: {len(result.questions)} questions so far")
        elif result.is_empty:
            self._show_status(EMPTY_MESSAGE)
        else:
            self._show_status(f"Found {len(result.questions)} questions")

    # -- list editing ----------------------------------------------------

    def set_questions(self, questions: List[ExtractedQuestion]) -> None:
        self.questions = list(questions)
        self.question_list.clear()
        for question in self.questions:
            self.question_list.addItem(self._make_item(question))
        self.empty_label.setVisible(not self.questions)
        if self.questions:
            self.question_list.setCurrentRow(0)
        self._update_actions()

    def _make_item(self, question: ExtractedQuestion) -> QListWidgetItem:
        item = QListWidgetItem(f"{question.title}  (page {question.page}, {question.marks:g} marks)")
        item.setIcon(QIcon(thumbnail_pixmap(question.image)))
        return item

    def replace_question(self, index: int, question: ExtractedQuestion) -> None:
        self.questions[index] = question
        item = self._make_item(question)
        self.question_list.item(index).setText(item.text())
        self.question_list.item(index).setIcon(item.icon())

    def set_marks(self, index: int, marks: float) -> None:
        self.replace_question(index, self.questions[index].with_marks(marks))

    def remove_question(self, index: int) -> None:
        del self.questions[index]
        self.question_list.takeItem(index)
        self.empty_label.setVisible(not self.questions)
        self._update_actions()

    @property
    def current_index(self) -> int:
        return self.question_list.currentRow()

    def _on_selection_changed(self, row: int) -> None:
        if 0 <= row < len(self.questions):
            self.marks_spin.blockSignals(True)
            self.marks_spin.setValue(self.questions[row].marks)
            self.marks_spin.blockSignals(False)
        self._update_actions()

    def _on_marks_changed(self, value: float) -> None:
        if 0 <= self.current_index < len(self.questions):
            self.set_marks(self.current_index, value)

    def _on_remove_clicked(self) -> None:
        if 0 <= self.current_index < len(self.questions):
            self.remove_question(self.current_index)

    def _on_fix_crop_clicked(self) -> None:
        index = self.current_index
        if self.source is None or not 0 <= index < len(self.questions):
            return
        dialog = CropEditorDialog(
            self.source,
            self.questions[index],
            target=self.target,
            render_scale=self.config.reference_scale,
            parent=self,
        )
        if dialog.exec() and dialog.result_item is not None:
            self.replace_question(index, dialog.result_item)

    # -- commit ----------------------------------------------------------

    def commit(self, sink: QuestionSink, existing_count: int = 0) -> List[str]:
        ids = commit_questions(self.questions, sink, existing_count=existing_count)
        self._show_status(f"Committed {len(ids)} questions")
        return ids

    def _on_commit_clicked(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Select Output Folder")
        if not folder:
            return
        sink = DirectorySink(Path(folder))
        self.commit(sink, existing_count=len(sink))

    def _on_memo_clicked(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Select Folder With Stored Questions")
        if not folder:
            return
        sink = DirectorySink(Path(folder))
        result = commit_answers(self.questions, sink.stored_questions(), sink)
        self._show_status(
            f"Attached {len(result.committed)} answers, {len(result.unmatched)} unmatched"
        )

    # -- plumbing --------------------------------------------------------

    def _set_source(self, source: Optional[DocumentSource]) -> None:
        if self.source is not None and hasattr(self.source, "close"):
            self.source.close()
        self.source = source

    def _set_busy(self, busy: bool) -> None:
        if busy:
            self.empty_label.setVisible(False)
        self.open_btn.setEnabled(not busy)
        self.cancel_btn.setEnabled(busy)
        self._update_actions(busy)

    def _update_actions(self, busy: bool = False) -> None:
        has_selection = not busy and 0 <= self.current_index < len(self.questions)
        for widget in (self.marks_spin, self.fix_crop_btn, self.remove_btn):
            widget.setEnabled(has_selection)
        self.commit_btn.setEnabled(not busy and bool(self.questions))
        self.memo_btn.setEnabled(not busy and bool(self.questions))

    def _on_open_clicked(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open Question Paper", "", "PDF Files (*.pdf)")
        if path:
            self.start_segmentation(Path(path))

    @Slot(str)
    def _show_status(self, message: str) -> None:
        self.statusBar().showMessage(message)

    @Slot(str, str)
    def _on_log_record(self, message: str, level: str) -> None:
        if level in ("WARNING", "ERROR", "CRITICAL"):
            self._show_status(message)

    def closeEvent(self, event) -> None:
        self.cancel_segmentation()
        if self._worker is not None:
            self._worker.join(timeout=5)
        detach_status_handler(self.log_handler)
        self._set_source(None)
        super().closeEvent(event)
