"""Snap raw difference boxes onto the word boxes they touch."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .types import Rect


def rects_intersect(a: Rect, b: Rect) -> bool:
    """Open interval overlap test; touching edges do not count."""

    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def dedupe_boxes(boxes: Iterable[Rect]) -> List[Rect]:
    """Drop boxes whose rounded geometry was already seen (first one wins)."""

    seen: Dict[Tuple[int, int, int, int], Rect] = {}
    for box in boxes:
        seen.setdefault(box.rounded_key(), box)
    return list(seen.values())


def map_diffs_to_word_boxes(
    diff_boxes: Sequence[Rect],
    word_boxes: Sequence[Rect],
    min_word_size: float = 8,
) -> List[Rect]:
    """Replace each diff box by the sizeable word boxes it intersects.

    A diff box that touches no word of at least ``min_word_size`` on both
    sides is kept unchanged.
    """

    matched: List[Rect] = []
    for diff_box in diff_boxes:
        found = False
        for word in word_boxes:
            if not rects_intersect(diff_box, word):
                continue
            if word.width >= min_word_size and word.height >= min_word_size:
                matched.append(word)
                found = True
        if not found:
            matched.append(diff_box)
    return dedupe_boxes(matched)


def translate_boxes(boxes: Iterable[Rect], dx: float, dy: float) -> List[Rect]:
    return [box.translated(dx, dy) for box in boxes]


def offset_word_boxes(words: Sequence[Rect], crop: Optional[Rect]) -> List[Rect]:
    """Move word boxes into the coordinate space of ``crop``."""

    if crop is None:
        return list(words)
    return translate_boxes(words, -crop.x, -crop.y)
