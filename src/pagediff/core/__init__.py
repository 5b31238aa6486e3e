"""Page comparison and alignment engine."""

from .align import find_best_offset, shift_bitmap
from .mask import apply_ignore_regions, build_diff_mask, dilate_mask
from .page_align import find_page_mappings, plan_page_mappings, text_similarity
from .pixels import count_diff_pixels, diff_flags, pixel_delta
from .regions import extract_diff_boxes
from .types import (
    ComparisonResult,
    Offset,
    PageComparisonResult,
    PageMapping,
    PageRender,
    Rect,
    WordBox,
    as_bitmap,
    blank_bitmap,
)
from .words import map_diffs_to_word_boxes, rects_intersect

__all__ = [
    "find_best_offset",
    "shift_bitmap",
    "apply_ignore_regions",
    "build_diff_mask",
    "dilate_mask",
    "find_page_mappings",
    "plan_page_mappings",
    "text_similarity",
    "count_diff_pixels",
    "diff_flags",
    "pixel_delta",
    "extract_diff_boxes",
    "ComparisonResult",
    "Offset",
    "PageComparisonResult",
    "PageMapping",
    "PageRender",
    "Rect",
    "WordBox",
    "as_bitmap",
    "blank_bitmap",
    "map_diffs_to_word_boxes",
    "rects_intersect",
]
