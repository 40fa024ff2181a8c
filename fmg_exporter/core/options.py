"""
Export option resolution.

Numeric options are coerced the same way for every extractor: values that
are not finite numbers fall back to the default, everything else is clamped
into range.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

DEFAULT_RESOLUTION = 1.0
DEFAULT_JPEG_QUALITY = 0.92
DEFAULT_TILES = 2.0
DEFAULT_TILE_SCALE = 1.0

SVG_FLAGS = ("debug", "noLabels", "noWater", "noScaleBar", "noIce", "noVignette")


def clamp_number(value: Any, minimum: float = -math.inf, maximum: float = math.inf) -> Optional[float]:
    """
    Coerce ``value`` to a float clamped to [minimum, maximum].

    Returns None when the value is missing or not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return min(maximum, max(minimum, number))


def _clamped_or_default(value: Any, minimum: float, maximum: float, default: float) -> float:
    clamped = clamp_number(value, minimum, maximum)
    return default if clamped is None else clamped


@dataclass(frozen=True)
class ExportOptions:
    """Resolved options shared by all extractors"""

    debug: bool = False
    no_labels: bool = False
    no_water: bool = False
    no_scale_bar: bool = False
    no_ice: bool = False
    no_vignette: bool = False
    resolution: float = DEFAULT_RESOLUTION
    quality: float = DEFAULT_JPEG_QUALITY
    tiles_x: float = DEFAULT_TILES
    tiles_y: float = DEFAULT_TILES
    tile_scale: float = DEFAULT_TILE_SCALE

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "ExportOptions":
        """Build options from a caller-supplied mapping, ignoring unknown keys"""
        opts = dict(options or {})
        return cls(
            debug=bool(opts.get("debug")),
            no_labels=bool(opts.get("noLabels")),
            no_water=bool(opts.get("noWater")),
            no_scale_bar=bool(opts.get("noScaleBar")),
            no_ice=bool(opts.get("noIce")),
            no_vignette=bool(opts.get("noVignette")),
            resolution=_clamped_or_default(opts.get("resolution"), 0.1, 20, DEFAULT_RESOLUTION),
            quality=_clamped_or_default(opts.get("quality"), 0, 1, DEFAULT_JPEG_QUALITY),
            tiles_x=_clamped_or_default(opts.get("tilesX"), 1, 50, DEFAULT_TILES),
            tiles_y=_clamped_or_default(opts.get("tilesY"), 1, 50, DEFAULT_TILES),
            tile_scale=_clamped_or_default(opts.get("tileScale"), 0.1, 10, DEFAULT_TILE_SCALE),
        )

    def svg_flags(self) -> Dict[str, bool]:
        """Flags for the in-page renderer; the full map is always rendered"""
        return {
            "debug": self.debug,
            "noLabels": self.no_labels,
            "noWater": self.no_water,
            "noScaleBar": self.no_scale_bar,
            "noIce": self.no_ice,
            "noVignette": self.no_vignette,
            "fullMap": True,
        }
