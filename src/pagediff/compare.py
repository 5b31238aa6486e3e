"""Document comparison pipeline: page pairing, alignment and highlights."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from .core.align import find_best_offset, shift_bitmap
from .core.mask import apply_ignore_regions, build_diff_mask, dilate_mask
from .core.page_align import plan_page_mappings
from .core.regions import extract_diff_boxes
from .core.types import (
    ComparisonResult,
    PageComparisonResult,
    PageMapping,
    PageRender,
    as_bitmap,
)
from .core.words import map_diffs_to_word_boxes, offset_word_boxes, translate_boxes
from .presets import CompareParams
from .utils.image_ops import common_canvas, crop_bitmap
from .utils.pdf_ops import DocumentSource, as_source, render_document

logger = logging.getLogger(__name__)


def compare_pdfs(
    source_a: DocumentSource | str | bytes,
    source_b: DocumentSource | str | bytes,
    *,
    params: Optional[CompareParams] = None,
    workers: Optional[int] = None,
) -> ComparisonResult:
    """Render two PDFs and compare them page by page."""

    params = params or CompareParams()
    pages_a = render_document(as_source(source_a), params.scale)
    pages_b = render_document(as_source(source_b), params.scale)
    return compare_documents(pages_a, pages_b, params=params, workers=workers)


def compare_documents(
    pages_a: Sequence[PageRender],
    pages_b: Sequence[PageRender],
    *,
    params: Optional[CompareParams] = None,
    workers: Optional[int] = None,
) -> ComparisonResult:
    """Compare two already rendered documents.

    Pages are paired by index when both documents have the same length and
    by text similarity otherwise (see :func:`plan_page_mappings`). Each pair
    is compared independently; with ``workers`` > 1 pairs run on a thread
    pool but results keep the mapping order.
    """

    params = params or CompareParams()
    mappings = plan_page_mappings(
        [page.text for page in pages_a],
        [page.text for page in pages_b],
        smart_alignment=params.smart_alignment,
        tolerance=params.alignment_tolerance,
        similarity_threshold=params.similarity_threshold,
        fallback_to_same_index=params.fallback_to_same_index,
    )
    aligned = len(pages_a) != len(pages_b)
    if aligned:
        logger.info(
            "Smart alignment: %d vs %d pages, comparing %d matched pair(s)",
            len(pages_a),
            len(pages_b),
            len(mappings),
        )

    def run(mapping: PageMapping) -> PageComparisonResult:
        return compare_page_pair(pages_a[mapping.page_a], pages_b[mapping.page_b], mapping, params)

    if workers and workers > 1 and len(mappings) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results: List[PageComparisonResult] = list(executor.map(run, mappings))
    else:
        results = [run(mapping) for mapping in mappings]

    total = sum(result.diff_pixels for result in results)
    logger.info("Compared %d page pair(s), %d differing pixel(s)", len(results), total)
    return ComparisonResult(
        pages=tuple(results),
        total_diff_pixels=total,
        page_count_a=len(pages_a),
        page_count_b=len(pages_b),
        aligned=aligned,
        params=params.to_dict(),
    )


def compare_page_pair(
    render_a: PageRender,
    render_b: PageRender,
    mapping: PageMapping,
    params: CompareParams,
) -> PageComparisonResult:
    """Run the per page pipeline for one mapped pair.

    Crop and ignore regions are looked up by the page index of document A.
    Highlights of side B are projected back through the inverse of the best
    offset before they are snapped to B's words.
    """

    crop = params.crop_for_page(mapping.page_a)
    words_a = offset_word_boxes(render_a.words, crop)
    words_b = offset_word_boxes(render_b.words, crop)

    img_a, img_b = common_canvas(
        crop_bitmap(as_bitmap(render_a.bitmap), crop),
        crop_bitmap(as_bitmap(render_b.bitmap), crop),
    )
    height, width = img_a.shape[:2]

    best = find_best_offset(
        img_a, img_b, radius=params.max_shift, tolerance=params.color_tolerance
    )
    shifted_b = shift_bitmap(img_b, best.dx, best.dy)

    mask, diff_pixels = build_diff_mask(img_a, shifted_b, params.color_tolerance)
    apply_ignore_regions(mask, params.masks_for_page(mapping.page_a))
    mask = dilate_mask(mask, params.dilation_radius)

    boxes = extract_diff_boxes(mask, params.min_highlight_area)
    highlights_a = map_diffs_to_word_boxes(boxes, words_a, params.min_word_size)
    back_dx, back_dy = best.inverse()
    highlights_b = map_diffs_to_word_boxes(
        translate_boxes(boxes, back_dx, back_dy), words_b, params.min_word_size
    )

    logger.debug(
        "Page %d<->%d: offset (%d, %d), %d diff pixel(s), %d region(s)",
        mapping.page_a,
        mapping.page_b,
        best.dx,
        best.dy,
        diff_pixels,
        len(boxes),
    )
    return PageComparisonResult(
        page_a=mapping.page_a,
        page_b=mapping.page_b,
        similarity=mapping.similarity,
        diff_pixels=diff_pixels,
        highlights_a=tuple(highlights_a),
        highlights_b=tuple(highlights_b),
        offset=best,
        width=width,
        height=height,
    )
