"""
Static catalog of supported export formats.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .exceptions import InvalidFormatError


@dataclass(frozen=True)
class FormatSpec:
    """Catalog entry describing one export format"""

    id: str
    ext: str
    mime_type: str
    description: str

    def filename_for(self, file_base: str) -> str:
        return f"{file_base}{self.ext}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "ext": self.ext,
            "mimeType": self.mime_type,
            "description": self.description,
        }


FORMATS: Tuple[FormatSpec, ...] = (
    FormatSpec("svg", ".svg", "image/svg+xml", "Full map as SVG"),
    FormatSpec("png", ".png", "image/png", "Full map as PNG"),
    FormatSpec("jpeg", ".jpeg", "image/jpeg", "Full map as JPEG"),
    FormatSpec("map", ".map", "text/plain", "Native FMG save file (.map)"),

    FormatSpec("json_full", ".full.json", "application/json", "Complete JSON export (pack + grid)"),
    FormatSpec("json_minimal", ".minimal.json", "application/json", "Minimal JSON export (pack without cells)"),
    FormatSpec("json_pack_cells", ".packCells.json", "application/json", "JSON export of pack cells"),
    FormatSpec("json_grid_cells", ".gridCells.json", "application/json", "JSON export of grid cells"),

    FormatSpec("geojson_cells", ".cells.geojson", "application/geo+json", "GeoJSON cells"),
    FormatSpec("geojson_routes", ".routes.geojson", "application/geo+json", "GeoJSON routes"),
    FormatSpec("geojson_rivers", ".rivers.geojson", "application/geo+json", "GeoJSON rivers"),
    FormatSpec("geojson_markers", ".markers.geojson", "application/geo+json", "GeoJSON markers"),

    FormatSpec("tiles_zip", ".zip", "application/zip", "Zip of PNG tiles plus schema"),
    FormatSpec("heightmap_png", ".heightmap.png", "image/png", "Grayscale heightmap PNG"),
)

FORMAT_IDS: Tuple[str, ...] = tuple(spec.id for spec in FORMATS)

_BY_ID: Dict[str, FormatSpec] = {spec.id: spec for spec in FORMATS}


def get_format(format_id) -> FormatSpec:
    """
    Look up a format by id.

    Raises:
        InvalidFormatError: If the id is not in the catalog
    """
    spec = _BY_ID.get(format_id) if isinstance(format_id, str) else None
    if spec is None:
        raise InvalidFormatError(format_id, list(FORMAT_IDS))
    return spec


def list_formats() -> List[Dict[str, str]]:
    """Catalog as plain dicts, in declaration order"""
    return [spec.to_dict() for spec in FORMATS]
