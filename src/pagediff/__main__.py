"""Command line interface for pagediff."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from dotenv import load_dotenv

from . import __version__
from .compare import compare_pdfs
from .core.types import ComparisonResult
from .errors import ConfigurationError, PageCountMismatchError
from .overlay import annotate_pdf, make_annotation_style, render_overlay, write_overlay_png
from .presets import ColorScheme, CompareParams, PageRegion, get_preset, params_from_env, parse_color
from .report import write_json_report
from .utils.image_ops import crop_bitmap
from .utils.pdf_ops import as_source, open_document, rasterize_page

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagediff",
        description="Visual page-by-page PDF comparison with word level highlights.",
    )
    parser.add_argument("--a", required=True, help="Path to the first PDF")
    parser.add_argument("--b", required=True, help="Path to the second PDF")
    parser.add_argument("--json", required=True, help="Diff report path (JSON)")
    parser.add_argument("--annotated-a", help="Output PDF with highlights on document A")
    parser.add_argument("--annotated-b", help="Output PDF with highlights on document B")
    parser.add_argument("--preview-dir", help="Directory for PNG overlays of every compared page")
    parser.add_argument("--preset", default="balanced", help="Preset name (strict|balanced|loose)")
    parser.add_argument("--scale", type=float, help="Render scale (pixels per PDF point)")
    parser.add_argument("--max-shift", type=int, help="Alignment search radius in pixels")
    parser.add_argument("--tolerance", type=int, help="Summed RGB delta above which pixels differ")
    parser.add_argument("--min-area", type=int, help="Minimum highlight area in pixels")
    parser.add_argument("--min-word-size", type=int, help="Minimum word box side in pixels")
    parser.add_argument("--dilate", type=int, help="Diff mask dilation radius in pixels")
    parser.add_argument("--alpha", type=float, help="Highlight opacity (0-1)")
    parser.add_argument("--alignment-tolerance", type=int, help="Pages searched around each page")
    parser.add_argument("--similarity-threshold", type=float, help="Minimum page text similarity")
    parser.add_argument(
        "--no-smart-alignment",
        action="store_true",
        help="Fail instead of aligning documents with different page counts",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not pair unmatched pages with the page of the same index",
    )
    parser.add_argument("--color-a", help="Highlight colour for document A (#RRGGBB or r,g,b)")
    parser.add_argument("--color-b", help="Highlight colour for document B (#RRGGBB or r,g,b)")
    parser.add_argument("--workers", type=int, help="Compare pages on this many threads")
    parser.add_argument(
        "--crop",
        action="append",
        dest="crops",
        help="Region to compare (format: [p<page>:]x,y,w,h in pixels)",
    )
    parser.add_argument(
        "--mask",
        action="append",
        dest="masks",
        help="Region to ignore (format: [p<page>:]x,y,w,h in pixels)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        preset = get_preset(args.preset)
    except KeyError as exc:
        parser.error(str(exc))
        return 2

    try:
        params = _override_params(params_from_env(preset.params), args)
        colors = preset.colors.with_overrides(
            side_a=parse_color(args.color_a), side_b=parse_color(args.color_b)
        )
    except (ConfigurationError, ValueError) as exc:
        parser.error(str(exc))
        return 2

    try:
        result = compare_pdfs(args.a, args.b, params=params, workers=args.workers)
    except (ConfigurationError, PageCountMismatchError) as exc:
        logger.error("%s", exc)
        return 2

    write_json_report(result, args.json)

    for side, source, output, color in (
        ("a", args.a, args.annotated_a, colors.side_a),
        ("b", args.b, args.annotated_b, colors.side_b),
    ):
        if not output:
            continue
        style = make_annotation_style(
            color, stroke_width=preset.stroke_width, fill_opacity=params.highlight_alpha
        )
        annotate_pdf(result, source_pdf=source, output_pdf=output, side=side, style=style, params=params)

    if args.preview_dir:
        _write_previews(result, args.a, args.b, Path(args.preview_dir), params, colors)

    logger.info(
        "%d page pair(s) compared, %d differing pixel(s)",
        len(result.pages),
        result.total_diff_pixels,
    )
    return 0


def _write_previews(
    result: ComparisonResult,
    path_a: str,
    path_b: str,
    out_dir: Path,
    params: CompareParams,
    colors: ColorScheme,
) -> None:
    doc_a = open_document(as_source(path_a))
    doc_b = open_document(as_source(path_b))
    try:
        for page in result.pages:
            crop = params.crop_for_page(page.page_a)
            for doc, index, boxes, color, label in (
                (doc_a, page.page_a, page.highlights_a, colors.side_a, "a"),
                (doc_b, page.page_b, page.highlights_b, colors.side_b, "b"),
            ):
                bitmap = crop_bitmap(rasterize_page(doc[index], params.scale), crop)
                overlay = render_overlay(bitmap, boxes, color, params.highlight_alpha)
                write_overlay_png(overlay, out_dir / f"page{page.page_a + 1:03d}_{label}{index + 1:03d}.png")
    finally:
        doc_a.close()
        doc_b.close()


def _override_params(base: CompareParams, args: argparse.Namespace) -> CompareParams:
    overrides = {}
    for field_name, arg_name in (
        ("scale", "scale"),
        ("max_shift", "max_shift"),
        ("color_tolerance", "tolerance"),
        ("min_highlight_area", "min_area"),
        ("min_word_size", "min_word_size"),
        ("dilation_radius", "dilate"),
        ("highlight_alpha", "alpha"),
        ("alignment_tolerance", "alignment_tolerance"),
        ("similarity_threshold", "similarity_threshold"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    if args.no_smart_alignment:
        overrides["smart_alignment"] = False
    if args.no_fallback:
        overrides["fallback_to_same_index"] = False
    if args.crops:
        overrides["crop_regions"] = tuple(_parse_regions(args.crops))
    if args.masks:
        overrides["mask_regions"] = tuple(_parse_regions(args.masks))
    return base.copy(**overrides)


def _parse_regions(values: List[str]) -> List[PageRegion]:
    regions: List[PageRegion] = []
    for value in values:
        value = value.strip()
        if not value:
            continue
        page_index = None
        coords = value
        if value.lower().startswith("p") and ":" in value:
            prefix, coords = value.split(":", 1)
            try:
                page_index = int(prefix[1:]) - 1
            except ValueError as exc:
                raise ValueError(f"Invalid region page specifier '{prefix}'") from exc
            if page_index < 0:
                raise ValueError(f"Region page numbers start at 1, got '{prefix}'")
        parts = [c.strip() for c in coords.split(",")]
        if len(parts) != 4:
            raise ValueError(f"Region '{value}' must have four values (x,y,w,h)")
        try:
            x, y, width, height = (float(p) for p in parts)
        except ValueError as exc:
            raise ValueError(f"Region '{value}' has invalid coordinates") from exc
        regions.append(PageRegion(page_index=page_index, x=x, y=y, width=width, height=height))
    return regions


if __name__ == "__main__":
    sys.exit(main())
