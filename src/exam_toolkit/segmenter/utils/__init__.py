"""PDF utilities for the segmenter."""

from .pdf import crop_page_rect, extract_text_tokens, get_page_dimensions, render_page

__all__ = [
    "crop_page_rect",
    "extract_text_tokens",
    "get_page_dimensions",
    "render_page",
]
