"""
Logging utilities for showing log records in the GUI status bar.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal


class _LogBridge(QObject):
    # message, level name
    record_emitted = Signal(str, str)


class StatusBarLogHandler(logging.Handler):
    """
    A logging handler that forwards formatted records through a Qt signal.

    Records may come from the segmentation worker thread; the signal is
    delivered to receivers in their own thread, so slots can touch widgets.

    Example:
        >>> handler = attach_status_handler()
        >>> handler.bridge.record_emitted.connect(lambda msg, level: status_bar.showMessage(msg))
    """

    def __init__(self, level: int = logging.INFO):
        super().__init__(level)
        self.bridge = _LogBridge()
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.bridge.record_emitted.emit(self.format(record), record.levelname)
        except Exception:
            self.handleError(record)


def attach_status_handler(logger_name: Optional[str] = "exam_toolkit", level: int = logging.INFO) -> StatusBarLogHandler:
    """
    Attach a StatusBarLogHandler to the specified logger.

    Args:
        logger_name: Name of logger to attach to. None = root logger.
        level: Minimum level forwarded.

    Returns:
        The attached handler (for later removal).
    """
    logger = logging.getLogger(logger_name)
    handler = StatusBarLogHandler(level)
    logger.addHandler(handler)
    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)
    return handler


def detach_status_handler(handler: StatusBarLogHandler, logger_name: Optional[str] = "exam_toolkit") -> None:
    logging.getLogger(logger_name).removeHandler(handler)
