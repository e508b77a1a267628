"""
Module: correction.geometry

Purpose:
    Pure rectangle arithmetic for the crop corrector: moving the rectangle
    and resizing it through one of eight handles, always keeping it inside
    the displayed page and never smaller than the minimum size.

Key Classes:
    - Handle: The eight resize handles

Key Functions:
    - move_rect(): Translate by a delta, clamped to the page
    - drag_handle(): Move the edge(s) a handle controls to a pointer position
    - clamp_rect(): Force an arbitrary rectangle into the page
    - handle_positions(): Handle centres, for drawing and hit testing
    - hit_test(): Which handle (or the body) is under a point

Used By:
    - correction.session
    - gui.crop_editor
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from exam_toolkit.core.models import CropRect

MIN_SIZE = 10.0


class Handle(str, Enum):
    N = "n"
    S = "s"
    E = "e"
    W = "w"
    NE = "ne"
    NW = "nw"
    SE = "se"
    SW = "sw"

    @property
    def moves_top(self) -> bool:
        return "n" in self.value

    @property
    def moves_bottom(self) -> bool:
        return "s" in self.value

    @property
    def moves_left(self) -> bool:
        return "w" in self.value

    @property
    def moves_right(self) -> bool:
        return "e" in self.value


MOVE = "move"


def _clip(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_rect(rect: CropRect, bounds_w: float, bounds_h: float, min_size: float = MIN_SIZE) -> CropRect:
    """
    Force a rectangle inside ``bounds_w`` x ``bounds_h``.

    Size is clamped first (at least ``min_size``, at most the bounds), then
    position so the rectangle fits.
    """
    w = _clip(rect.w, min(min_size, bounds_w), bounds_w)
    h = _clip(rect.h, min(min_size, bounds_h), bounds_h)
    x = _clip(rect.x, 0.0, bounds_w - w)
    y = _clip(rect.y, 0.0, bounds_h - h)
    return CropRect(x, y, w, h)


def move_rect(rect: CropRect, dx: float, dy: float, bounds_w: float, bounds_h: float) -> CropRect:
    """
    Translate the rectangle, keeping its size and staying inside the page.

    Example:
        >>> move_rect(CropRect(0, 0, 100, 100), 50, -20, 600, 800)
        CropRect(x=50, y=0.0, w=100, h=100)
    """
    x = _clip(rect.x + dx, 0.0, max(0.0, bounds_w - rect.w))
    y = _clip(rect.y + dy, 0.0, max(0.0, bounds_h - rect.h))
    return CropRect(x, y, rect.w, rect.h)


def drag_handle(
    rect: CropRect,
    handle: Handle,
    x: float,
    y: float,
    bounds_w: float,
    bounds_h: float,
    min_size: float = MIN_SIZE,
) -> CropRect:
    """
    Move the edge(s) controlled by ``handle`` to the pointer at (x, y).

    Each edge is clamped independently: to the page, and to ``min_size``
    from the opposite edge, which stays put.

    Args:
        rect: Current rectangle in display pixels.
        handle: Which handle is dragged.
        x: Pointer x in display pixels.
        y: Pointer y in display pixels.
        bounds_w: Displayed page width.
        bounds_h: Displayed page height.
        min_size: Minimum width and height.

    Returns:
        The resized rectangle.

    Example:
        >>> drag_handle(CropRect(100, 100, 200, 200), Handle.SE, 1000, 1000, 600, 800)
        CropRect(x=100, y=100, w=500, h=700)
    """
    left, top, right, bottom = rect.x, rect.y, rect.right, rect.bottom

    if handle.moves_top:
        top = _clip(y, 0.0, bottom - min_size)
    if handle.moves_bottom:
        bottom = _clip(y, top + min_size, bounds_h)
    if handle.moves_left:
        left = _clip(x, 0.0, right - min_size)
    if handle.moves_right:
        right = _clip(x, left + min_size, bounds_w)

    return CropRect(left, top, right - left, bottom - top)


def handle_positions(rect: CropRect) -> Dict[Handle, Tuple[float, float]]:
    """Centre point of every handle."""
    cx = rect.x + rect.w / 2
    cy = rect.y + rect.h / 2
    return {
        Handle.N: (cx, rect.y),
        Handle.S: (cx, rect.bottom),
        Handle.E: (rect.right, cy),
        Handle.W: (rect.x, cy),
        Handle.NE: (rect.right, rect.y),
        Handle.NW: (rect.x, rect.y),
        Handle.SE: (rect.right, rect.bottom),
        Handle.SW: (rect.x, rect.bottom),
    }


def hit_test(rect: CropRect, x: float, y: float, radius: float = 6.0) -> Optional[Handle | str]:
    """
    Find what a pointer press at (x, y) grabs.

    Corners win over edges when handles overlap on small rectangles.

    Returns:
        A Handle, MOVE for the rectangle body, or None outside it.
    """
    positions = handle_positions(rect)
    for handle in (Handle.NW, Handle.NE, Handle.SW, Handle.SE, Handle.N, Handle.S, Handle.E, Handle.W):
        hx, hy = positions[handle]
        if abs(x - hx) <= radius and abs(y - hy) <= radius:
            return handle
    if rect.x <= x <= rect.right and rect.y <= y <= rect.bottom:
        return MOVE
    return None
