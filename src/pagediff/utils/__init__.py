"""Utility functions used across the project."""

from .image_ops import common_canvas, crop_bitmap, pad_bitmap
from .pdf_ops import DocumentSource, PdfBytes, PdfPath, as_source, render_document

__all__ = [
    "common_canvas",
    "crop_bitmap",
    "pad_bitmap",
    "DocumentSource",
    "PdfBytes",
    "PdfPath",
    "as_source",
    "render_document",
]
