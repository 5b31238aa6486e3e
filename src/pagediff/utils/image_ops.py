"""Crop and pad helpers used to bring two page renders to one canvas."""
from typing import Optional, Tuple

import math

from ..core.types import Bitmap, Rect, blank_bitmap


def crop_bitmap(bitmap: Bitmap, region: Optional[Rect]) -> Bitmap:
    """Return the part of ``bitmap`` under ``region``.

    The output always measures the region's size; parts of the region that
    fall outside the source stay white.
    """

    if region is None:
        return bitmap
    x0 = int(math.floor(region.x))
    y0 = int(math.floor(region.y))
    width = max(1, int(math.ceil(region.width)))
    height = max(1, int(math.ceil(region.height)))

    cropped = blank_bitmap(width, height)
    src_h, src_w = bitmap.shape[:2]
    sx0, sy0 = max(0, x0), max(0, y0)
    sx1, sy1 = min(src_w, x0 + width), min(src_h, y0 + height)
    if sx0 < sx1 and sy0 < sy1:
        cropped[sy0 - y0 : sy1 - y0, sx0 - x0 : sx1 - x0] = bitmap[sy0:sy1, sx0:sx1]
    return cropped


def pad_bitmap(bitmap: Bitmap, width: int, height: int) -> Bitmap:
    """Grow ``bitmap`` to ``width`` x ``height`` with white on the right/bottom."""

    src_h, src_w = bitmap.shape[:2]
    if (src_w, src_h) == (width, height):
        return bitmap
    padded = blank_bitmap(width, height)
    h, w = min(src_h, height), min(src_w, width)
    padded[:h, :w] = bitmap[:h, :w]
    return padded


def common_canvas(a: Bitmap, b: Bitmap) -> Tuple[Bitmap, Bitmap]:
    """Pad both bitmaps to the larger of their widths and heights."""

    width = max(a.shape[1], b.shape[1])
    height = max(a.shape[0], b.shape[0])
    return pad_bitmap(a, width, height), pad_bitmap(b, width, height)
