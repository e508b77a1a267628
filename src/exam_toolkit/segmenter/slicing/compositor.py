"""
Module: segmenter.slicing.compositor

Purpose:
    Creates composite images from slices. A composite is a single vertical
    image containing all content for a question, stitched from slices of
    potentially multiple pages or from manually added crop strips.

Key Functions:
    - stitch_images(): Stack images vertically into one composite

Dependencies:
    - PIL.Image: Image stitching

Used By:
    - segmenter.slicing.accumulator: Finalises accumulated parts
    - correction.session: Save Crop stitches accumulated slices
"""

from __future__ import annotations

from typing import Optional, Sequence

from PIL import Image

BACKGROUND = "white"


def _composite_mode(images: Sequence[Image.Image]) -> str:
    modes = {img.mode for img in images}
    if len(modes) == 1 and modes <= {"L", "RGB"}:
        return modes.pop()
    return "RGB"


def stitch_images(images: Sequence[Image.Image]) -> Optional[Image.Image]:
    """
    Stack images vertically into one composite.

    Canvas width is the widest image and height the sum of heights.
    Narrower images are left-aligned on a white background, never
    stretched. A single image is returned unchanged (same object).

    Args:
        images: Slices in top-to-bottom order.

    Returns:
        Composite image, or None when ``images`` is empty.

    Example:
        >>> composite = stitch_images([Image.new("RGB", (600, 400)), Image.new("RGB", (500, 300))])
        >>> composite.size
        (600, 700)
    """
    if not images:
        return None
    if len(images) == 1:
        return images[0]

    width = max(img.width for img in images)
    height = sum(img.height for img in images)
    mode = _composite_mode(images)

    composite = Image.new(mode, (width, height), BACKGROUND)
    y_offset = 0
    for img in images:
        composite.paste(img if img.mode == mode else img.convert(mode), (0, y_offset))
        y_offset += img.height

    return composite
