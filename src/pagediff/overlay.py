"""Draw comparison highlights onto bitmaps and PDF copies."""
from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Literal

import cv2
import fitz
import numpy as np

from .core.types import Bitmap, ComparisonResult, Rect
from .presets import CompareParams
from .utils.pdf_ops import DocumentSource, as_source, open_document, px_to_pdf_rect

Side = Literal["a", "b"]


@dataclass(frozen=True)
class AnnotationStyle:
    stroke_color: tuple[float, float, float]
    stroke_width: float = 0.8
    fill_color: tuple[float, float, float] = (0.93, 0.93, 0.93)
    fill_opacity: float = 0.32


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(minimum, min(value, maximum))


def tint_color(color: tuple[float, float, float], *, blend: float = 0.6) -> tuple[float, float, float]:
    """Blend an RGB colour with white to create a softer highlight fill."""

    blend = _clamp(blend)
    return tuple(_clamp(channel + (1.0 - channel) * blend) for channel in color)


def make_annotation_style(
    base_color: tuple[float, float, float],
    *,
    stroke_width: float,
    fill_opacity: float,
    fill_tint: float = 0.0,
) -> AnnotationStyle:
    """Create an annotation style using the given base colour for strokes.

    ``fill_tint`` lightens the fill towards white; 0 keeps the stroke colour.
    """

    return AnnotationStyle(
        stroke_color=base_color,
        stroke_width=stroke_width,
        fill_color=tint_color(base_color, blend=fill_tint),
        fill_opacity=fill_opacity,
    )


def render_overlay(
    bitmap: Bitmap,
    boxes: Iterable[Rect],
    color: tuple[float, float, float],
    alpha: float,
) -> Bitmap:
    """Alpha blend filled ``boxes`` of ``color`` over a copy of ``bitmap``."""

    out = bitmap.astype(np.float32)
    height, width = bitmap.shape[:2]
    layer = np.zeros((height, width), dtype=bool)
    for box in boxes:
        x0 = max(0, int(math.floor(box.x)))
        y0 = max(0, int(math.floor(box.y)))
        x1 = min(width, int(math.ceil(box.right)))
        y1 = min(height, int(math.ceil(box.bottom)))
        if x0 < x1 and y0 < y1:
            layer[y0:y1, x0:x1] = True

    rgb = np.array([channel * 255.0 for channel in color], dtype=np.float32)
    alpha = _clamp(alpha)
    out[layer, :3] = out[layer, :3] * (1.0 - alpha) + rgb * alpha
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def write_overlay_png(bitmap: Bitmap, path: str | Path) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(bitmap, cv2.COLOR_RGBA2BGRA))
    if not ok:
        raise OSError(f"Could not encode overlay for {out_path}")
    out_path.write_bytes(encoded.tobytes())


def annotate_pdf(
    result: ComparisonResult,
    *,
    source_pdf: DocumentSource | str | Path,
    output_pdf: str | Path,
    side: Side,
    style: AnnotationStyle,
    params: CompareParams,
) -> None:
    """Draw one side's highlights onto a copy of its PDF."""

    output_path = Path(output_pdf)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = open_document(as_source(source_pdf))
    try:
        _draw_annotations(doc, result, side, style, params)
        doc.save(str(output_path))
    finally:
        doc.close()


def _draw_annotations(
    doc: fitz.Document,
    result: ComparisonResult,
    side: Side,
    style: AnnotationStyle,
    params: CompareParams,
) -> None:
    for page_result in result.pages:
        page_index = page_result.page_a if side == "a" else page_result.page_b
        boxes = page_result.highlights_a if side == "a" else page_result.highlights_b
        if page_index >= len(doc) or not boxes:
            continue
        page = doc[page_index]
        crop = params.crop_for_page(page_result.page_a)
        shape = page.new_shape()
        drawn = 0
        for box in boxes:
            rect = px_to_pdf_rect(box, params.scale, page.rect, crop)
            if rect.is_empty:
                continue
            shape.draw_rect(rect)
            shape.finish(
                color=style.stroke_color,
                width=style.stroke_width,
                fill=style.fill_color,
                fill_opacity=style.fill_opacity,
            )
            drawn += 1
        if drawn:
            shape.commit()
