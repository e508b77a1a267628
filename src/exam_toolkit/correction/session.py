"""
Module: correction.session

Purpose:
    Headless crop-correction session. An operator picks one extracted
    question (or memo answer), adjusts a rectangle over its rendered page,
    optionally collects several slices, and saves a stitched replacement
    image. The GUI dialog and the `crop` CLI command both drive this class,
    so the whole correction flow is testable without a display.

Key Classes:
    - CropSession: open -> adjust* -> save | cancel
    - CropSessionError: Operation on a session that has ended

Dependencies:
    - segmenter.source.DocumentSource: Page rendering
    - segmenter.slicing.compositor.stitch_images: Combining slices

Coordinates:
    The rectangle lives in display pixels, the size the page is shown at.
    Crops are taken from the natively rendered bitmap after scaling by
    natural size / displayed size on each axis.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Tuple

from PIL import Image

from exam_toolkit.core.models import CropRect, CropTarget, ExtractedQuestion
from exam_toolkit.segmenter.slicing.compositor import stitch_images
from exam_toolkit.segmenter.source import DocumentSource
from exam_toolkit.segmenter.utils.pdf import crop_page_rect

from .geometry import Handle, clamp_rect, drag_handle, move_rect

logger = logging.getLogger(__name__)

DEFAULT_RENDER_SCALE = 1.6
MIN_INITIAL_HEIGHT = 50.0
RESET_HEIGHT = 200.0


class CropSessionError(RuntimeError):
    """A crop session was used after it was saved or cancelled."""


class SessionState(str, Enum):
    OPEN = "open"
    SAVED = "saved"
    CANCELLED = "cancelled"


class CropSession:
    """
    One operator correction of one extracted item.

    Args:
        source: Document the item was extracted from.
        item: The question or answer being corrected.
        target: Which extracted list the item belongs to.
        render_scale: Scale of the native page bitmap. Stored item
            coordinates are multiplied by it.
        display_size: (width, height) the page is displayed at. Defaults
            to the native bitmap size.

    Example:
        >>> session = CropSession(source, question)
        >>> session.drag_handle(Handle.S, 300, 700)
        >>> session.add_slice()
        >>> session.change_page(question.page + 1)
        >>> corrected = session.save()
    """

    def __init__(
        self,
        source: DocumentSource,
        item: ExtractedQuestion,
        *,
        target: CropTarget = CropTarget.QUESTION,
        render_scale: float = DEFAULT_RENDER_SCALE,
        display_size: Optional[Tuple[float, float]] = None,
    ):
        if render_scale <= 0:
            raise ValueError(f"render_scale must be positive: {render_scale}")
        self.source = source
        self.item = item
        self.target = target
        self.render_scale = render_scale
        self.state = SessionState.OPEN
        self._slices: List[Image.Image] = []

        self.page_number = self._validate_page(item.page)
        self.page_image = source.render(self.page_number, render_scale)
        self.display_width, self.display_height = display_size or self.page_image.size

        self.rect = self._seed_rect()
        logger.debug(
            f"Opened crop session for {target.value} {item.number} on page {self.page_number} "
            f"(rect={self.rect.as_tuple()})"
        )

    # -- state -----------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    @property
    def slices(self) -> Tuple[Image.Image, ...]:
        return tuple(self._slices)

    def _require_open(self) -> None:
        if not self.is_open:
            raise CropSessionError(f"Crop session already {self.state.value}")

    def _validate_page(self, page_number: int) -> int:
        if not 1 <= page_number <= self.source.page_count:
            raise ValueError(f"Page {page_number} out of range 1..{self.source.page_count}")
        return page_number

    @property
    def display_ratio(self) -> Tuple[float, float]:
        """Natural bitmap size / displayed size, per axis."""
        width, height = self.page_image.size
        sx = width / self.display_width if self.display_width > 0 else 1.0
        sy = height / self.display_height if self.display_height > 0 else 1.0
        return sx, sy

    def _seed_rect(self) -> CropRect:
        _, sy = self.display_ratio
        coords = self.item.coordinates
        top = max(0.0, coords.y_start * self.render_scale / sy)
        bottom = coords.y_end * self.render_scale / sy
        height = max(MIN_INITIAL_HEIGHT, bottom - top)
        return clamp_rect(CropRect(0.0, top, self.display_width, height), self.display_width, self.display_height)

    # -- adjust ----------------------------------------------------------

    def set_display_size(self, width: float, height: float) -> None:
        """Rescale the rectangle when the page is shown at a new size."""
        self._require_open()
        if width <= 0 or height <= 0:
            raise ValueError(f"Display size must be positive: {width}x{height}")
        fx = width / self.display_width
        fy = height / self.display_height
        self.display_width, self.display_height = width, height
        self.rect = clamp_rect(self.rect.scaled(fx, fy), width, height)

    def set_rect(self, rect: CropRect) -> CropRect:
        self._require_open()
        self.rect = clamp_rect(rect, self.display_width, self.display_height)
        return self.rect

    def move(self, dx: float, dy: float) -> CropRect:
        self._require_open()
        self.rect = move_rect(self.rect, dx, dy, self.display_width, self.display_height)
        return self.rect

    def drag_handle(self, handle: Handle, x: float, y: float) -> CropRect:
        self._require_open()
        self.rect = drag_handle(self.rect, Handle(handle), x, y, self.display_width, self.display_height)
        return self.rect

    def change_page(self, page_number: int) -> None:
        """
        Show another page and reset the rectangle to the top of it.

        Collected slices are kept, so one item can combine regions of
        several pages.

        Raises:
            ValueError: If the page doesn't exist.
        """
        self._require_open()
        self.page_number = self._validate_page(page_number)
        old_w, old_h = self.page_image.size
        self.page_image = self.source.render(page_number, self.render_scale)
        if self.page_image.size != (old_w, old_h):
            # Keep the on-screen zoom when the new page has a different size
            sx, sy = old_w / self.display_width, old_h / self.display_height
            self.display_width = self.page_image.width / sx
            self.display_height = self.page_image.height / sy
        self.rect = clamp_rect(
            CropRect(0.0, 0.0, self.display_width, RESET_HEIGHT),
            self.display_width,
            self.display_height,
        )
        logger.debug(f"Crop session moved to page {page_number}")

    # -- slices ----------------------------------------------------------

    def crop_current(self) -> Image.Image:
        """Crop the rectangle's region from the native page bitmap."""
        self._require_open()
        sx, sy = self.display_ratio
        native = self.rect.scaled(sx, sy)
        return crop_page_rect(self.page_image, native.x, native.y, native.w, native.h)

    def add_slice(self) -> Image.Image:
        """Append the current region to the slice list; the session stays open."""
        part = self.crop_current()
        self._slices.append(part)
        logger.debug(f"Added slice {len(self._slices)} ({part.width}x{part.height}) from page {self.page_number}")
        return part

    def clear_slices(self) -> None:
        self._require_open()
        self._slices.clear()

    # -- exit ------------------------------------------------------------

    def save(self) -> ExtractedQuestion:
        """
        Crop once more, stitch every slice and end the session.

        Returns:
            A copy of the item with its image replaced by the composite.
        """
        self.add_slice()
        composite = stitch_images(self._slices)
        updated = self.item.with_image(composite)
        self.state = SessionState.SAVED
        logger.info(
            f"Saved crop for {self.target.value} {self.item.number}: "
            f"{len(self._slices)} slice(s), {composite.width}x{composite.height}"
        )
        self._slices = []
        return updated

    def cancel(self) -> ExtractedQuestion:
        """End the session without changes; returns the original item."""
        self._require_open()
        self.state = SessionState.CANCELLED
        self._slices = []
        return self.item
