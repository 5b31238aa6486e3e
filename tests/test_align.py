import numpy as np

from pagediff.core.align import candidate_offsets, find_best_offset, shift_bitmap
from pagediff.core.pixels import count_diff_pixels
from pagediff.core.types import blank_bitmap


def _square(x: int, y: int, size: int = 20, canvas: int = 100) -> np.ndarray:
    bitmap = blank_bitmap(canvas, canvas)
    bitmap[y : y + size, x : x + size, :3] = 0
    return bitmap


def test_shift_moves_content_and_backfills_white():
    bitmap = blank_bitmap(10, 10)
    bitmap[3, 2, :3] = 0

    shifted = shift_bitmap(bitmap, 1, 2)

    assert shifted[5, 3, :3].tolist() == [0, 0, 0]
    assert shifted[3, 2, :3].tolist() == [255, 255, 255]
    assert (shifted[..., 3] == 255).all()
    # exposed top rows and left column are white
    assert (shifted[:2] == 255).all()
    assert (shifted[:, :1] == 255).all()


def test_shift_negative_offsets():
    bitmap = blank_bitmap(10, 10)
    bitmap[5, 5, :3] = 0
    shifted = shift_bitmap(bitmap, -3, -4)
    assert shifted[1, 2, :3].tolist() == [0, 0, 0]
    assert (shifted[-4:] == 255).all()
    assert (shifted[:, -3:] == 255).all()


def test_shift_past_the_border_is_blank():
    bitmap = np.zeros((8, 8, 4), dtype=np.uint8)
    assert (shift_bitmap(bitmap, 8, 0) == 255).all()
    assert (shift_bitmap(bitmap, 0, -9) == 255).all()


def test_candidates_scan_rows_first():
    offsets = candidate_offsets(1)
    assert offsets[0] == (-1, -1)
    assert offsets[1] == (0, -1)
    assert offsets[-1] == (1, 1)
    assert len(candidate_offsets(3)) == 49


def test_radius_zero_is_plain_comparison():
    a = _square(10, 10)
    b = _square(14, 13)
    best = find_best_offset(a, b, radius=0, tolerance=50)
    assert (best.dx, best.dy) == (0, 0)
    assert best.diff_pixels == count_diff_pixels(a, b, 50)


def test_finds_horizontal_shift_of_square():
    a = _square(10, 10)
    b = _square(12, 10)

    best = find_best_offset(a, b, radius=3, tolerance=50)

    assert (best.dx, best.dy) == (-2, 0)
    assert best.diff_pixels == 0
    assert count_diff_pixels(a, shift_bitmap(b, best.dx, best.dy), 50) == 0
    assert best.inverse() == (2, 0)


def test_ties_keep_first_offset_in_scan_order():
    a = blank_bitmap(20, 20)
    best = find_best_offset(a, a.copy(), radius=2, tolerance=10)
    assert (best.dx, best.dy) == (-2, -2)
    assert best.diff_pixels == 0


def test_thread_pool_gives_same_offset():
    a = _square(30, 40)
    b = _square(28, 41)
    sequential = find_best_offset(a, b, radius=3, tolerance=50)
    pooled = find_best_offset(a, b, radius=3, tolerance=50, workers=4)
    assert pooled == sequential
    assert (pooled.dx, pooled.dy) == (2, -1)
