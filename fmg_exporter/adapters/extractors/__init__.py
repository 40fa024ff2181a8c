"""
Format extractors and their registration.
"""

from .base import BaseExtractor
from .geojson import GeoJsonExtractor
from .heightmap import HeightmapExtractor
from .images import RasterExtractor, SvgExtractor
from .native import MapFileExtractor
from .structured_json import StructuredJsonExtractor
from .tiles import TilesZipExtractor


def register_default_extractors(registry) -> None:
    """Register the built-in extractor of every catalog format"""
    registry.register_extractor(
        "svg",
        SvgExtractor,
        family="vector",
        description="Full-map SVG from the generator's renderer",
        requires=["getMapURL", "getFileName"],
    )

    for format_id in ("png", "jpeg"):
        registry.register_extractor(
            format_id,
            RasterExtractor,
            family="raster",
            description=f"Full-map {format_id.upper()} re-encoded through a canvas",
            requires=["getMapURL", "graphWidth", "graphHeight"],
        )

    registry.register_extractor(
        "map",
        MapFileExtractor,
        family="native",
        description="Generator save file",
        requires=["prepareMapData"],
    )

    json_variants = {
        "json_full": "full",
        "json_minimal": "minimal",
        "json_pack_cells": "packCells",
        "json_grid_cells": "gridCells",
    }
    for format_id, variant in json_variants.items():
        registry.register_extractor(
            format_id,
            lambda spec, variant=variant: StructuredJsonExtractor(spec, variant),
            family="json",
            description=f"Structured JSON ({variant})",
            requires=["pack", "grid", "mapCoordinates"],
        )

    geojson_requires = {
        "cells": ["getCoordinates", "getFriendlyHeight", "getCellPopulation"],
        "routes": ["getCoordinates"],
        "rivers": ["getCoordinates", "Rivers.addMeandering"],
        "markers": ["getCoordinates", "notes"],
    }
    for kind, requires in geojson_requires.items():
        registry.register_extractor(
            f"geojson_{kind}",
            lambda spec, kind=kind: GeoJsonExtractor(spec, kind),
            family="geojson",
            description=f"GeoJSON {kind} FeatureCollection",
            requires=requires,
        )

    registry.register_extractor(
        "tiles_zip",
        TilesZipExtractor,
        family="tiles",
        description="PNG tiles of the full map plus a layout schema",
        requires=["getMapURL"],
    )

    registry.register_extractor(
        "heightmap_png",
        HeightmapExtractor,
        family="heightmap",
        description="Grayscale heightmap scaled to the map size",
        requires=["grid"],
    )


__all__ = [
    "BaseExtractor",
    "GeoJsonExtractor",
    "HeightmapExtractor",
    "MapFileExtractor",
    "RasterExtractor",
    "StructuredJsonExtractor",
    "SvgExtractor",
    "TilesZipExtractor",
    "register_default_extractors",
]
