"""
Module: segmenter.utils.pdf

Purpose:
    PDF rendering and text-layer utilities on top of PyMuPDF. Renders whole
    pages to bitmaps at an arbitrary scale, crops rectangles out of rendered
    pages, and turns the page's text layer into PositionedTextToken runs.

Key Functions:
    - render_page(): Render a full page to a PIL image at a scale factor
    - crop_page_rect(): Render a page and crop a clamped rectangle from it
    - get_page_dimensions(): Page size in pixels at a scale factor
    - extract_text_tokens(): Text runs with PDF-space (bottom-up) positions

Dependencies:
    - fitz (PyMuPDF): PDF rendering and text extraction
    - PIL.Image: Image handling

Used By:
    - segmenter.source: PyMuPDFDocumentSource delegates to these helpers
"""

from __future__ import annotations

import logging
from typing import List, Tuple

import fitz
from PIL import Image

from exam_toolkit.core.models import PositionedTextToken

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_SCALE = 1.6


def render_page(page: fitz.Page, scale: float = DEFAULT_SCALE) -> Image.Image:
    """
    Render a full PDF page to an image.

    Args:
        page: PyMuPDF page object.
        scale: Zoom factor (1.0 = 72 DPI). Defaults to 1.6.

    Returns:
        RGB PIL image of the page.

    Raises:
        ValueError: If scale is not positive.

    Example:
        >>> image = render_page(doc[0], scale=1.0)
        >>> image.size
        (595, 842)
    """
    if scale <= 0:
        raise ValueError(f"Invalid scale: {scale}")

    pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def crop_page_rect(
    image: Image.Image,
    x: float,
    y: float,
    width: float,
    height: float,
) -> Image.Image:
    """
    Crop a rectangle from a rendered page, clamped to the bitmap.

    x and y are clamped into the image; width and height are clamped to
    at least one pixel and to what remains of the image past (x, y).

    Args:
        image: Rendered page bitmap.
        x: Left edge in bitmap pixels.
        y: Top edge in bitmap pixels.
        width: Requested width in bitmap pixels.
        height: Requested height in bitmap pixels.

    Returns:
        Cropped image, never smaller than 1x1.
    """
    left = int(round(min(max(x, 0), image.width - 1)))
    top = int(round(min(max(y, 0), image.height - 1)))
    w = int(round(min(max(width, 1), image.width - left)))
    h = int(round(min(max(height, 1), image.height - top)))
    return image.crop((left, top, left + max(w, 1), top + max(h, 1)))


def get_page_dimensions(
    page: fitz.Page,
    scale: float = DEFAULT_SCALE,
) -> Tuple[float, float]:
    """
    Get page dimensions in pixels at the specified scale.

    Example:
        >>> get_page_dimensions(page, scale=1.0)
        (595.0, 842.0)
    """
    return page.rect.width * scale, page.rect.height * scale


def extract_text_tokens(page: fitz.Page) -> List[PositionedTextToken]:
    """
    Extract text runs with positions in PDF space.

    Each span of the page's text layer becomes one token. PyMuPDF reports
    span origins top-down; they are flipped to bottom-up so every document
    source emits the same coordinate space.

    Args:
        page: PyMuPDF page object.

    Returns:
        Tokens in text-layer order (not reading order).

    Raises:
        RuntimeError, ValueError: Propagated from PyMuPDF on a broken page.
    """
    page_height = page.rect.height
    data = page.get_text("dict")
    tokens: List[PositionedTextToken] = []
    for block in data.get("blocks", []):
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text.strip():
                    continue
                origin = span.get("origin") or (0.0, page_height)
                size = span.get("size", 0.0)
                transform = [size, 0, 0, size, origin[0], page_height - origin[1]]
                tokens.append(PositionedTextToken.from_transform(text, transform))
    return tokens
