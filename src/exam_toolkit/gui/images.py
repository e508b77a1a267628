"""
PIL <-> Qt image conversion.
"""
from __future__ import annotations

from PIL import Image
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap


def pil_to_qimage(image: Image.Image) -> QImage:
    """Convert a PIL image to a QImage that owns its pixel data."""
    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format.Format_RGBA8888)
    # QImage borrows ``data``; copy before it is garbage collected
    return qimage.copy()


def pil_to_qpixmap(image: Image.Image) -> QPixmap:
    return QPixmap.fromImage(pil_to_qimage(image))


def thumbnail_pixmap(image: Image.Image | None, width: int = 160) -> QPixmap:
    """Scaled-down pixmap for list views; empty pixmap when there is no image."""
    if image is None:
        return QPixmap()
    return pil_to_qpixmap(image).scaledToWidth(width, Qt.TransformationMode.SmoothTransformation)
