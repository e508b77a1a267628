"""
Entry point for the PySide6 review GUI.
"""
import logging
import sys
from pathlib import Path


def run(pdf_path: Path | None = None) -> int:
    """
    Main entry point for the GUI application.
    """
    from PySide6.QtWidgets import QApplication

    from exam_toolkit.gui.review_window import ReviewWindow

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Exam Toolkit")
    app.setApplicationDisplayName("Exam Toolkit")

    window = ReviewWindow()
    window.show()
    if pdf_path is not None:
        window.start_segmentation(pdf_path)

    return app.exec()


def main() -> int:
    pdf = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    return run(pdf)


if __name__ == "__main__":
    raise SystemExit(main())
