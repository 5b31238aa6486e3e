import pytest

fitz = pytest.importorskip("fitz")

from pagediff.core.types import Rect
from pagediff.errors import ConfigurationError
from pagediff.utils.pdf_ops import (
    PdfBytes,
    PdfPath,
    as_source,
    extract_word_boxes,
    open_document,
    px_to_pdf_rect,
    rasterize_page,
    render_document,
)


def _make_pdf(path, text="Hello world", width=200, height=100):
    doc = fitz.open()
    page = doc.new_page(width=width, height=height)
    if text:
        page.insert_text((20, 50), text, fontsize=12)
    doc.save(str(path))
    doc.close()


def test_rasterize_page_size_and_channels(tmp_path):
    pdf = tmp_path / "page.pdf"
    _make_pdf(pdf, text="")
    doc = fitz.open(str(pdf))
    try:
        bitmap = rasterize_page(doc[0], 1.5)
    finally:
        doc.close()

    assert bitmap.shape == (150, 300, 4)
    assert bitmap.dtype.name == "uint8"
    assert (bitmap == 255).all()


def test_word_boxes_cover_each_word(tmp_path):
    pdf = tmp_path / "words.pdf"
    _make_pdf(pdf)
    doc = fitz.open(str(pdf))
    try:
        page = doc[0]
        raw = page.get_text("words")
        boxes = extract_word_boxes(page, 2.0)
    finally:
        doc.close()

    assert len(boxes) == len(raw) == 2
    for box, (x0, y0, x1, y1, *_rest) in zip(boxes, raw):
        assert box.x < x0 * 2.0
        assert box.y < y0 * 2.0
        assert box.right > x1 * 2.0
        assert box.bottom > y1 * 2.0


def test_render_document_from_path_and_bytes(tmp_path):
    pdf = tmp_path / "doc.pdf"
    _make_pdf(pdf)

    from_path = render_document(as_source(str(pdf)), 1.0)
    from_bytes = render_document(as_source(pdf.read_bytes()), 1.0)

    assert len(from_path) == len(from_bytes) == 1
    assert "Hello world" in from_path[0].text
    assert (from_path[0].bitmap == from_bytes[0].bitmap).all()
    assert from_path[0].words == from_bytes[0].words


def test_as_source_accepts_known_types(tmp_path):
    assert as_source(tmp_path / "x.pdf") == PdfPath(tmp_path / "x.pdf")
    assert isinstance(as_source(b"%PDF"), PdfBytes)
    source = PdfBytes(b"%PDF", name="inline.pdf")
    assert as_source(source) is source
    with pytest.raises(ConfigurationError):
        as_source(42)
    with pytest.raises(ConfigurationError):
        open_document("not a source")


def test_px_to_pdf_rect_round_trips_through_scale():
    page_rect = fitz.Rect(0, 0, 200, 200)

    rect = px_to_pdf_rect(Rect(30, 30, 60, 60), 3.0, page_rect)
    assert tuple(rect) == pytest.approx((10, 10, 30, 30))

    cropped = px_to_pdf_rect(Rect(30, 30, 60, 60), 3.0, page_rect, crop=Rect(15, 15, 300, 300))
    assert tuple(cropped) == pytest.approx((15, 15, 35, 35))

    clipped = px_to_pdf_rect(Rect(570, 0, 60, 30), 3.0, page_rect)
    assert tuple(clipped) == pytest.approx((190, 0, 200, 10))
