"""Difference mask construction, ignore regions and dilation."""
from __future__ import annotations

import math
from typing import Iterable, Tuple

import cv2
import numpy as np

from .pixels import diff_flags
from .types import Bitmap, DiffMask, Rect


def build_diff_mask(a: Bitmap, b_aligned: Bitmap, tolerance: int) -> Tuple[DiffMask, int]:
    """Return the diff mask of two aligned bitmaps and its pixel count."""

    mask = diff_flags(a, b_aligned, tolerance)
    return mask, int(np.count_nonzero(mask))


def apply_ignore_regions(mask: DiffMask, regions: Iterable[Rect]) -> None:
    """Clear every mask pixel covered by ``regions`` (in place).

    Regions are clipped to the mask; fractional edges are widened to whole
    pixels.
    """

    if mask.size == 0:
        return
    height, width = mask.shape
    for region in regions:
        x0 = max(0, int(math.floor(region.x)))
        y0 = max(0, int(math.floor(region.y)))
        x1 = min(width, int(math.ceil(region.right)))
        y1 = min(height, int(math.ceil(region.bottom)))
        if x0 >= x1 or y0 >= y1:
            continue
        mask[y0:y1, x0:x1] = False


def dilate_mask(mask: DiffMask, radius: int = 0) -> DiffMask:
    """Grow set pixels by ``radius`` in Chebyshev distance.

    A radius of 0 returns an unchanged copy.
    """

    if radius <= 0 or mask.size == 0:
        return mask.copy()
    size = 2 * radius + 1
    kernel = np.ones((size, size), np.uint8)
    dilated = cv2.dilate(mask.astype(np.uint8), kernel)
    return dilated > 0
