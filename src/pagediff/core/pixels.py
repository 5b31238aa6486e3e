"""Per-pixel comparison of two equally sized RGBA bitmaps."""
from __future__ import annotations

import numpy as np

from ..errors import DimensionMismatchError
from .types import Bitmap, DiffMask


def _check_shapes(a: Bitmap, b: Bitmap) -> None:
    if a.shape != b.shape:
        raise DimensionMismatchError(f"Bitmaps differ in size: {a.shape} vs {b.shape}")


def pixel_delta(a: Bitmap, b: Bitmap) -> np.ndarray:
    """Return ``|dR| + |dG| + |dB|`` for every pixel; alpha is ignored."""

    _check_shapes(a, b)
    diff = np.abs(a[..., :3].astype(np.int16) - b[..., :3].astype(np.int16))
    return diff.sum(axis=2, dtype=np.int16)


def diff_flags(a: Bitmap, b: Bitmap, tolerance: int) -> DiffMask:
    """Flag pixels whose summed channel delta exceeds ``tolerance``."""

    return pixel_delta(a, b) > tolerance


def count_diff_pixels(a: Bitmap, b: Bitmap, tolerance: int) -> int:
    return int(np.count_nonzero(diff_flags(a, b, tolerance)))
