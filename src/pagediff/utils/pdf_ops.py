"""PyMuPDF helpers that turn PDF pages into engine inputs.

Documents enter through :data:`DocumentSource`, a small tagged union over the
accepted representations. It is resolved once by :func:`open_document`; the
comparison engine itself only ever sees bitmaps, word boxes and page text.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import fitz
import numpy as np

from ..core.types import Bitmap, PageRender, Rect, as_bitmap, blank_bitmap
from ..errors import ConfigurationError, InvalidDimensionsError

logger = logging.getLogger(__name__)

# Word boxes are widened by these fractions of the glyph width / line height.
WORD_PAD_X = 0.18
WORD_PAD_Y = 0.15


@dataclass(frozen=True)
class PdfPath:
    path: Path


@dataclass(frozen=True)
class PdfBytes:
    data: bytes
    name: str = "document.pdf"


DocumentSource = Union[PdfPath, PdfBytes]


def as_source(value: Union[DocumentSource, str, Path, bytes, bytearray, memoryview]) -> DocumentSource:
    """Wrap a path or an in-memory PDF into a :data:`DocumentSource`."""

    if isinstance(value, (PdfPath, PdfBytes)):
        return value
    if isinstance(value, (str, Path)):
        return PdfPath(Path(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return PdfBytes(bytes(value))
    raise ConfigurationError(
        f"Unsupported document source {type(value).__name__}; expected a path or PDF bytes"
    )


def open_document(source: DocumentSource) -> fitz.Document:
    if isinstance(source, PdfPath):
        return fitz.open(str(source.path))
    if isinstance(source, PdfBytes):
        return fitz.open(stream=source.data, filetype="pdf")
    raise ConfigurationError(f"Unsupported document source {type(source).__name__}")


def _check_page(page: fitz.Page) -> None:
    if page.rect.width <= 0 or page.rect.height <= 0:
        logger.error(
            "Invalid PDF dimensions on page %d: %.2fx%.2f",
            page.number,
            page.rect.width,
            page.rect.height,
        )
        raise InvalidDimensionsError(f"Invalid page dimensions: {page.rect.width}x{page.rect.height}")


def page_pixel_size(page: fitz.Page, scale: float) -> Tuple[int, int]:
    return int(math.floor(page.rect.width * scale)), int(math.floor(page.rect.height * scale))


def rasterize_page(page: fitz.Page, scale: float) -> Bitmap:
    """Render ``page`` to an opaque RGBA bitmap at ``scale`` pixels per point.

    The result always measures ``floor(width * scale)`` by
    ``floor(height * scale)`` so repeated renders line up exactly.
    """

    _check_page(page)
    width, height = page_pixel_size(page, scale)
    pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), colorspace=fitz.csRGB, alpha=False)
    rgb = np.frombuffer(pix.samples, dtype=np.uint8).reshape(pix.height, pix.width, pix.n)
    rendered = as_bitmap(rgb[:, :, :3])

    bitmap = blank_bitmap(width, height)
    h = min(height, rendered.shape[0])
    w = min(width, rendered.shape[1])
    bitmap[:h, :w] = rendered[:h, :w]
    return bitmap


def extract_word_boxes(page: fitz.Page, scale: float) -> List[Rect]:
    """Return one padded pixel box per whitespace delimited word."""

    boxes: List[Rect] = []
    for x0, y0, x1, y1, text, *_ in page.get_text("words"):
        text = text.strip()
        width = (x1 - x0) * scale
        height = (y1 - y0) * scale
        if not text or width <= 0 or height <= 0:
            continue
        char_width = width / len(text)
        pad_x = char_width * WORD_PAD_X
        pad_y = height * WORD_PAD_Y
        boxes.append(
            Rect(
                x=max(0.0, x0 * scale - pad_x),
                y=max(0.0, y0 * scale - pad_y),
                width=max(1.0, width + pad_x * 2),
                height=max(1.0, height + pad_y * 2),
            )
        )
    return boxes


def extract_page_text(page: fitz.Page) -> str:
    return page.get_text("text")


def render_page(page: fitz.Page, scale: float) -> PageRender:
    return PageRender(
        bitmap=rasterize_page(page, scale),
        words=tuple(extract_word_boxes(page, scale)),
        text=extract_page_text(page),
    )


def render_document(source: DocumentSource, scale: float) -> List[PageRender]:
    """Render every page of ``source`` once."""

    doc = open_document(source)
    try:
        renders = [render_page(page, scale) for page in doc]
    finally:
        doc.close()
    logger.info("Rendered %d page(s) at scale %.2f", len(renders), scale)
    return renders


def px_to_pdf_rect(box: Rect, scale: float, page_rect: fitz.Rect, crop: Optional[Rect] = None) -> fitz.Rect:
    """Convert a working-space pixel box back to PDF points on ``page_rect``."""

    if crop is not None:
        box = box.translated(crop.x, crop.y)
    factor = 1.0 / scale
    rect = fitz.Rect(
        page_rect.x0 + box.x * factor,
        page_rect.y0 + box.y * factor,
        page_rect.x0 + box.right * factor,
        page_rect.y0 + box.bottom * factor,
    )
    return rect & page_rect
