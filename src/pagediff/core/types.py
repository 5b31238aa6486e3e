"""Data model shared by the comparison engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError

# RGBA uint8 array of shape (height, width, 4).
Bitmap = np.ndarray
# Boolean array of shape (height, width); True marks a differing pixel.
DiffMask = np.ndarray

WHITE = (255, 255, 255, 255)


def blank_bitmap(width: int, height: int) -> Bitmap:
    """Return an opaque white canvas of ``width`` x ``height`` pixels."""

    return np.full((height, width, 4), 255, dtype=np.uint8)


def as_bitmap(image: np.ndarray) -> Bitmap:
    """Convert grayscale, RGB or RGBA arrays into a contiguous RGBA bitmap."""

    array = np.asarray(image)
    if array.dtype != np.uint8:
        raise ConfigurationError(f"Bitmaps must be 8-bit, got dtype {array.dtype}")
    if array.ndim == 2:
        rgb = np.repeat(array[:, :, None], 3, axis=2)
        alpha = np.full(array.shape + (1,), 255, dtype=np.uint8)
        return np.ascontiguousarray(np.concatenate([rgb, alpha], axis=2))
    if array.ndim == 3 and array.shape[2] == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.ascontiguousarray(np.concatenate([array, alpha], axis=2))
    if array.ndim == 3 and array.shape[2] == 4:
        return np.ascontiguousarray(array)
    raise ConfigurationError(f"Unsupported bitmap shape {array.shape}")


def mask_to_rgba(mask: DiffMask) -> Bitmap:
    """Render a diff mask as opaque red on a transparent background."""

    height, width = mask.shape
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[mask] = (255, 0, 0, 255)
    return rgba


@dataclass(frozen=True)
class Rect:
    """Axis aligned rectangle in pixel units (top-left origin)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def rounded_key(self) -> Tuple[int, int, int, int]:
        return (_round(self.x), _round(self.y), _round(self.width), _round(self.height))

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


# Word boxes are plain rectangles owned by one page.
WordBox = Rect


def _round(value: float) -> int:
    # Half rounds up, matching how highlight keys have always been built.
    return int(np.floor(value + 0.5))


@dataclass(frozen=True)
class Offset:
    """Best translation of side B onto side A and its disagreement count."""

    dx: int
    dy: int
    diff_pixels: int

    def inverse(self) -> Tuple[int, int]:
        return -self.dx, -self.dy

    def to_dict(self) -> Dict[str, int]:
        return {"dx": self.dx, "dy": self.dy, "diff_pixels": self.diff_pixels}


@dataclass(frozen=True)
class PageMapping:
    """Pairing of a page of document A with a page of document B."""

    page_a: int
    page_b: int
    similarity: float

    def to_dict(self) -> Dict[str, object]:
        return {"page_a": self.page_a, "page_b": self.page_b, "similarity": self.similarity}


@dataclass(frozen=True)
class PageRender:
    """Everything the engine needs to know about one rendered page."""

    bitmap: Bitmap
    words: Sequence[Rect] = ()
    text: str = ""


@dataclass(frozen=True)
class PageComparisonResult:
    page_a: int
    page_b: int
    similarity: float
    diff_pixels: int
    highlights_a: Tuple[Rect, ...]
    highlights_b: Tuple[Rect, ...]
    offset: Offset
    width: int
    height: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "page_a": self.page_a,
            "page_b": self.page_b,
            "similarity": self.similarity,
            "diff_pixels": self.diff_pixels,
            "width": self.width,
            "height": self.height,
            "alignment": self.offset.to_dict(),
            "highlights_a": [box.to_dict() for box in self.highlights_a],
            "highlights_b": [box.to_dict() for box in self.highlights_b],
        }


@dataclass(frozen=True)
class ComparisonResult:
    pages: Tuple[PageComparisonResult, ...]
    total_diff_pixels: int
    page_count_a: int
    page_count_b: int
    aligned: bool = False
    params: Dict[str, object] = field(default_factory=dict)

    @property
    def mappings(self) -> List[PageMapping]:
        return [PageMapping(page.page_a, page.page_b, page.similarity) for page in self.pages]

    def to_dict(self) -> Dict[str, object]:
        return {
            "page_count_a": self.page_count_a,
            "page_count_b": self.page_count_b,
            "smart_alignment": self.aligned,
            "total_pages": len(self.pages),
            "total_diff_pixels": self.total_diff_pixels,
            "params": dict(self.params),
            "pages": [page.to_dict() for page in self.pages],
        }
