"""Visual page comparison of rendered PDF documents."""

from __future__ import annotations

from .compare import compare_documents, compare_page_pair, compare_pdfs
from .core.types import (
    ComparisonResult,
    Offset,
    PageComparisonResult,
    PageMapping,
    PageRender,
    Rect,
)
from .errors import (
    ConfigurationError,
    DimensionMismatchError,
    PageCountMismatchError,
    PageDiffError,
)
from .presets import CompareParams, PageRegion, get_preset, iter_presets

__all__ = [
    "compare_pdfs",
    "compare_documents",
    "compare_page_pair",
    "ComparisonResult",
    "Offset",
    "PageComparisonResult",
    "PageMapping",
    "PageRender",
    "Rect",
    "ConfigurationError",
    "DimensionMismatchError",
    "PageCountMismatchError",
    "PageDiffError",
    "CompareParams",
    "PageRegion",
    "get_preset",
    "iter_presets",
]

__version__ = "0.3.0"
