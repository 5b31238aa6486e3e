"""Comparison parameters, presets and color helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .core.types import Rect
from .errors import ConfigurationError

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class ColorScheme:
    """RGB color palette used for highlights."""

    side_a: Color = (1.0, 0.0, 0.0)
    side_b: Color = (0.0, 0.78, 0.0)

    def with_overrides(
        self,
        *,
        side_a: Optional[Color] = None,
        side_b: Optional[Color] = None,
    ) -> "ColorScheme":
        return ColorScheme(side_a=side_a or self.side_a, side_b=side_b or self.side_b)

    def to_dict(self) -> Dict[str, Color]:
        return {"side_a": self.side_a, "side_b": self.side_b}


@dataclass(frozen=True)
class PageRegion:
    """Rectangle in working pixels, bound to one page or to every page.

    ``page_index`` is 0-based; ``None`` applies the region to all pages.
    """

    page_index: Optional[int]
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Region must have a positive area, got {self.width}x{self.height}"
            )
        if self.page_index is not None and self.page_index < 0:
            raise ConfigurationError(f"Region page index must be >= 0, got {self.page_index}")

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def applies_to(self, page_index: int) -> bool:
        return self.page_index is None or self.page_index == page_index

    def to_dict(self) -> Dict[str, object]:
        return {
            "page_index": self.page_index,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class CompareParams:
    """Parameters driving page alignment, diffing and highlight mapping.

    Instances are immutable and validated on construction, so a single object
    can be shared by every page worker of a comparison.
    """

    scale: float = 3.0
    max_shift: int = 3
    color_tolerance: int = 120
    min_highlight_area: int = 60
    min_word_size: int = 8
    dilation_radius: int = 0
    highlight_alpha: float = 0.32
    crop_regions: Tuple[PageRegion, ...] = ()
    mask_regions: Tuple[PageRegion, ...] = ()
    smart_alignment: bool = True
    alignment_tolerance: int = 2
    similarity_threshold: float = 0.3
    fallback_to_same_index: bool = True

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as tuples.
        object.__setattr__(self, "crop_regions", tuple(self.crop_regions))
        object.__setattr__(self, "mask_regions", tuple(self.mask_regions))

        if self.scale <= 0:
            raise ConfigurationError(f"scale must be positive, got {self.scale}")
        for name in (
            "max_shift",
            "color_tolerance",
            "min_highlight_area",
            "min_word_size",
            "dilation_radius",
            "alignment_tolerance",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")
        for name in ("highlight_alpha", "similarity_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be between 0 and 1, got {value}")
        for region in self.crop_regions + self.mask_regions:
            if not isinstance(region, PageRegion):
                raise ConfigurationError(f"Expected PageRegion, got {type(region).__name__}")

    def crop_for_page(self, page_index: int) -> Optional[Rect]:
        """Return the crop of ``page_index``; page specific crops win."""

        general: Optional[Rect] = None
        for region in self.crop_regions:
            if region.page_index == page_index:
                return region.rect
            if region.page_index is None and general is None:
                general = region.rect
        return general

    def masks_for_page(self, page_index: int) -> List[Rect]:
        return [region.rect for region in self.mask_regions if region.applies_to(page_index)]

    def to_dict(self) -> Dict[str, object]:
        return {
            "scale": self.scale,
            "max_shift": self.max_shift,
            "color_tolerance": self.color_tolerance,
            "min_highlight_area": self.min_highlight_area,
            "min_word_size": self.min_word_size,
            "dilation_radius": self.dilation_radius,
            "highlight_alpha": self.highlight_alpha,
            "crop_regions": [region.to_dict() for region in self.crop_regions],
            "mask_regions": [region.to_dict() for region in self.mask_regions],
            "smart_alignment": self.smart_alignment,
            "alignment_tolerance": self.alignment_tolerance,
            "similarity_threshold": self.similarity_threshold,
            "fallback_to_same_index": self.fallback_to_same_index,
        }

    def copy(self, **overrides: object) -> "CompareParams":
        return replace(self, **overrides)


ENV_PREFIX = "PAGEDIFF_"
_ENV_SKIP = {"crop_regions", "mask_regions"}


def params_from_env(
    base: Optional[CompareParams] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CompareParams:
    """Apply ``PAGEDIFF_<FIELD>`` environment overrides to ``base``."""

    base = base or CompareParams()
    environ = os.environ if environ is None else environ
    overrides: Dict[str, object] = {}
    for item in fields(CompareParams):
        if item.name in _ENV_SKIP:
            continue
        raw = environ.get(ENV_PREFIX + item.name.upper())
        if raw is None or not raw.strip():
            continue
        current = getattr(base, item.name)
        try:
            if isinstance(current, bool):
                overrides[item.name] = raw.strip().lower() in {"1", "true", "yes", "on"}
            elif isinstance(current, int):
                overrides[item.name] = int(raw)
            else:
                overrides[item.name] = float(raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid value for {ENV_PREFIX}{item.name.upper()}: {raw!r}"
            ) from exc
    return base.copy(**overrides) if overrides else base


@dataclass(frozen=True)
class Preset:
    """Bundle of parameters and highlight styling."""

    name: str
    description: str
    params: CompareParams
    colors: ColorScheme
    stroke_width: float = 0.8

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "params": self.params.to_dict(),
            "colors": self.colors.to_dict(),
            "stroke_width": self.stroke_width,
        }


_DEFAULT_COLORS = ColorScheme()

PRESETS: Mapping[str, Preset] = {
    "strict": Preset(
        name="strict",
        description="Flags faint changes; small shift search.",
        params=CompareParams(
            max_shift=2,
            color_tolerance=60,
            min_highlight_area=30,
            min_word_size=6,
        ),
        colors=_DEFAULT_COLORS,
        stroke_width=1.0,
    ),
    "balanced": Preset(
        name="balanced",
        description="Default mix of sensitivity and noise rejection.",
        params=CompareParams(),
        colors=_DEFAULT_COLORS,
    ),
    "loose": Preset(
        name="loose",
        description="Only strong changes; wider shift search and dilated highlights.",
        params=CompareParams(
            max_shift=4,
            color_tolerance=200,
            min_highlight_area=120,
            dilation_radius=2,
        ),
        colors=_DEFAULT_COLORS,
        stroke_width=0.6,
    ),
}


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()


def parse_color(value: Optional[str]) -> Optional[Color]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith("#"):
        hex_value = value[1:]
        if len(hex_value) not in (6, 8):
            raise ValueError("Hex colors must be #RRGGBB or #RRGGBBAA")
        rgb = tuple(int(hex_value[i : i + 2], 16) for i in range(0, 6, 2))
        return tuple(channel / 255.0 for channel in rgb)  # type: ignore[return-value]
    parts = value.replace(";", ",").split(",")
    if len(parts) != 3:
        raise ValueError("RGB colors must provide three comma separated numbers")
    rgb = tuple(float(p.strip()) for p in parts)
    if any(channel > 1.0 for channel in rgb):
        rgb = tuple(channel / 255.0 for channel in rgb)  # type: ignore[assignment]
    return rgb  # type: ignore[return-value]
