import numpy as np
import pytest

from pagediff.compare import compare_documents, compare_page_pair
from pagediff.core.types import PageMapping, PageRender, Rect, blank_bitmap
from pagediff.errors import PageCountMismatchError
from pagediff.presets import CompareParams, PageRegion

WORD = Rect(8, 8, 30, 14)


def _page(block: bool = False, width: int = 60, height: int = 40, text: str = "", words=(WORD,)):
    bitmap = blank_bitmap(width, height)
    if block:
        bitmap[10:20, 10:30, :3] = 0
    return PageRender(bitmap=bitmap, words=tuple(words), text=text)


def _square_page(x: int) -> PageRender:
    bitmap = blank_bitmap(100, 100)
    bitmap[10:30, x : x + 20, :3] = 0
    return PageRender(bitmap=bitmap)


def test_identical_documents_have_no_differences():
    pages = [_page(block=True, text="first page"), _page(text="second page")]
    result = compare_documents(pages, list(pages))

    assert result.total_diff_pixels == 0
    assert not result.aligned
    assert [(m.page_a, m.page_b, m.similarity) for m in result.mappings] == [(0, 0, 1.0), (1, 1, 1.0)]
    assert all(not page.highlights_a and not page.highlights_b for page in result.pages)


def test_shifted_render_is_not_a_difference():
    params = CompareParams(color_tolerance=50, max_shift=3)
    result = compare_documents([_square_page(10)], [_square_page(12)], params=params)

    page = result.pages[0]
    assert (page.offset.dx, page.offset.dy) == (-2, 0)
    assert page.diff_pixels == 0
    assert page.highlights_a == ()


def test_changed_block_snaps_to_word_on_both_sides():
    params = CompareParams(max_shift=0)
    page = compare_page_pair(_page(block=True), _page(), PageMapping(0, 0, 1.0), params)

    assert page.diff_pixels == 200
    assert page.highlights_a == (WORD,)
    assert page.highlights_b == (WORD,)
    assert (page.width, page.height) == (60, 40)


def test_side_b_boxes_follow_the_inverse_offset():
    a = blank_bitmap(100, 100)
    a[10:30, 10:30, :3] = 0
    a[60:75, 50:70, :3] = 0  # only on side A
    b = blank_bitmap(100, 100)
    b[10:30, 13:33, :3] = 0

    params = CompareParams(color_tolerance=50, max_shift=3)
    page = compare_page_pair(PageRender(a), PageRender(b), PageMapping(0, 0, 1.0), params)

    assert (page.offset.dx, page.offset.dy) == (-3, 0)
    assert page.highlights_a == (Rect(50, 60, 20, 15),)
    assert page.highlights_b == (Rect(53, 60, 20, 15),)


def test_small_changes_below_min_area_are_not_highlighted():
    a = blank_bitmap(40, 40)
    b = a.copy()
    b[5:8, 5:8, :3] = 0
    params = CompareParams(max_shift=0)
    page = compare_page_pair(PageRender(a), PageRender(b), PageMapping(0, 0, 1.0), params)
    assert page.diff_pixels == 9
    assert page.highlights_a == ()


def test_dilation_grows_highlights():
    a = blank_bitmap(40, 40)
    b = a.copy()
    b[10:14, 10:14, :3] = 0
    params = CompareParams(max_shift=0, dilation_radius=3)
    page = compare_page_pair(PageRender(a), PageRender(b), PageMapping(0, 0, 1.0), params)
    assert page.highlights_a == (Rect(7, 7, 10, 10),)


def test_masked_regions_stay_clear_even_with_dilation():
    params = CompareParams(
        max_shift=0,
        dilation_radius=3,
        mask_regions=(PageRegion(page_index=0, x=5, y=5, width=30, height=20),),
    )
    page = compare_page_pair(_page(block=True), _page(), PageMapping(0, 0, 1.0), params)

    assert page.highlights_a == ()
    assert page.highlights_b == ()
    # the raw count is taken before masking
    assert page.diff_pixels == 200


def test_masks_only_apply_to_their_page():
    params = CompareParams(
        max_shift=0,
        mask_regions=(PageRegion(page_index=1, x=0, y=0, width=60, height=40),),
    )
    page = compare_page_pair(_page(block=True), _page(), PageMapping(0, 0, 1.0), params)
    assert page.highlights_a == (WORD,)


def test_crop_moves_boxes_into_crop_space():
    params = CompareParams(max_shift=0, crop_regions=(PageRegion(None, 5, 5, 40, 30),))
    page = compare_page_pair(_page(block=True), _page(), PageMapping(0, 0, 1.0), params)

    assert (page.width, page.height) == (40, 30)
    assert page.highlights_a == (Rect(3, 3, 30, 14),)


def test_different_sizes_are_padded_with_white():
    small = PageRender(blank_bitmap(50, 30))
    large = PageRender(blank_bitmap(60, 40))
    page = compare_page_pair(small, large, PageMapping(0, 0, 1.0), CompareParams(max_shift=1))
    assert (page.width, page.height) == (60, 40)
    assert page.diff_pixels == 0


def test_page_count_mismatch_without_smart_alignment():
    params = CompareParams(smart_alignment=False)
    with pytest.raises(PageCountMismatchError):
        compare_documents([_page()], [_page(), _page()], params=params)


def test_inserted_page_is_aligned_by_text():
    texts = [
        "Introduction describing quarterly revenue growth across regional offices",
        "Methods survey responses collected from warehouse staff interviews",
        "Results inventory turnover improved while shipping delays decreased",
    ]
    pages_a = [_page(text=text) for text in texts]
    pages_b = [
        _page(text=texts[0]),
        _page(block=True, text="zebra giraffe pelican walrus xylophone"),
        _page(text=texts[1]),
        _page(text=texts[2]),
    ]

    result = compare_documents(pages_a, pages_b)

    assert result.aligned
    assert [(p.page_a, p.page_b) for p in result.pages] == [(0, 0), (1, 2), (2, 3)]
    assert all(p.similarity == pytest.approx(1.0) for p in result.pages)
    assert result.total_diff_pixels == 0
    assert (result.page_count_a, result.page_count_b) == (3, 4)


def test_worker_pool_preserves_page_order():
    pages_a = [_page(block=bool(i % 2), text=f"page {i}") for i in range(5)]
    pages_b = [_page(text=f"page {i}") for i in range(5)]
    params = CompareParams(max_shift=1)

    sequential = compare_documents(pages_a, pages_b, params=params)
    pooled = compare_documents(pages_a, pages_b, params=params, workers=3)

    assert pooled.pages == sequential.pages
    assert [p.page_a for p in pooled.pages] == [0, 1, 2, 3, 4]
    assert pooled.total_diff_pixels == 2 * 200


def test_result_serialises_to_plain_data():
    result = compare_documents([_page(block=True)], [_page()], params=CompareParams(max_shift=0))
    data = result.to_dict()

    assert data["total_diff_pixels"] == 200
    assert data["params"]["color_tolerance"] == 120
    page = data["pages"][0]
    assert page["highlights_a"] == [{"x": 8, "y": 8, "width": 30, "height": 14}]
    assert page["alignment"] == {"dx": 0, "dy": 0, "diff_pixels": 200}


def test_grayscale_bitmaps_are_accepted():
    gray = np.full((20, 20), 255, dtype=np.uint8)
    page = compare_page_pair(PageRender(gray), PageRender(gray.copy()), PageMapping(0, 0, 1.0), CompareParams())
    assert page.diff_pixels == 0
