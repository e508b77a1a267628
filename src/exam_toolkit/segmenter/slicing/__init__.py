"""
Module: segmenter.slicing

Purpose:
    Slicing subpackage: per-page slice bounds, cross-page accumulation by
    question number, and vertical stitching of slices into composites.

Key Modules:
    - bounds_calculator: Header positions -> SliceBounds per page
    - accumulator: question number -> accumulated slices
    - compositor: Vertical stitching and image encoding

Used By:
    - segmenter.pipeline
    - correction.session (stitching)
"""

from .accumulator import QuestionAccumulatorMap
from .bounds_calculator import PageBounds, SkippedRegion, calculate_page_bounds
from .compositor import stitch_images

__all__ = [
    "PageBounds",
    "QuestionAccumulatorMap",
    "SkippedRegion",
    "calculate_page_bounds",
    "stitch_images",
]
