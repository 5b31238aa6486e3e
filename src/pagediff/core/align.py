"""Brute force translation search between two page renders."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from .pixels import count_diff_pixels
from .types import Bitmap, Offset, blank_bitmap

logger = logging.getLogger(__name__)


def shift_bitmap(bitmap: Bitmap, dx: int, dy: int) -> Bitmap:
    """Return ``bitmap`` drawn at ``(dx, dy)`` on a white canvas of equal size.

    Content at ``(x, y)`` ends up at ``(x + dx, y + dy)``; pixels pushed past
    the border are lost and the exposed strip stays opaque white.
    """

    height, width = bitmap.shape[:2]
    shifted = blank_bitmap(width, height)
    if abs(dx) >= width or abs(dy) >= height:
        return shifted

    dst_x0, dst_x1 = max(0, dx), min(width, width + dx)
    dst_y0, dst_y1 = max(0, dy), min(height, height + dy)
    src_x0, src_y0 = dst_x0 - dx, dst_y0 - dy
    shifted[dst_y0:dst_y1, dst_x0:dst_x1] = bitmap[
        src_y0 : src_y0 + (dst_y1 - dst_y0), src_x0 : src_x0 + (dst_x1 - dst_x0)
    ]
    return shifted


def candidate_offsets(radius: int) -> List[Tuple[int, int]]:
    """All ``(dx, dy)`` pairs within ``radius`` in scan order (dy outer)."""

    span = range(-radius, radius + 1)
    return [(dx, dy) for dy in span for dx in span]


def find_best_offset(
    a: Bitmap,
    b: Bitmap,
    *,
    radius: int = 3,
    tolerance: int = 120,
    workers: Optional[int] = None,
) -> Offset:
    """Find the translation of ``b`` that disagrees least with ``a``.

    Every offset in ``[-radius, radius]`` on both axes is scored with the
    pixel comparator. Ties keep the first offset in scan order, also when
    candidates are scored on a thread pool.
    """

    candidates = candidate_offsets(radius)

    def score(offset: Tuple[int, int]) -> int:
        dx, dy = offset
        return count_diff_pixels(a, shift_bitmap(b, dx, dy), tolerance)

    if workers and workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            scores = list(executor.map(score, candidates))
    else:
        scores = [score(offset) for offset in candidates]

    best: Optional[Offset] = None
    for (dx, dy), diff in zip(candidates, scores):
        if best is None or diff < best.diff_pixels:
            best = Offset(dx=dx, dy=dy, diff_pixels=diff)

    assert best is not None
    logger.debug(
        "Best offset dx=%d dy=%d (%d differing pixels, %d candidates)",
        best.dx,
        best.dy,
        best.diff_pixels,
        len(candidates),
    )
    return best
