"""
Module: correction

Purpose:
    Operator crop correction of extracted questions and answers, as a
    headless session object plus the rectangle geometry it relies on.

Key Classes:
    - CropSession: open -> adjust* -> save | cancel
    - Handle: Eight resize handles
"""

from .geometry import MIN_SIZE, MOVE, Handle, clamp_rect, drag_handle, handle_positions, hit_test, move_rect
from .session import CropSession, CropSessionError, SessionState

__all__ = [
    "CropSession",
    "CropSessionError",
    "Handle",
    "MIN_SIZE",
    "MOVE",
    "SessionState",
    "clamp_rect",
    "drag_handle",
    "handle_positions",
    "hit_test",
    "move_rect",
]
