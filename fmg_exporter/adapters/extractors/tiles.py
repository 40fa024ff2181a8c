"""
Tiled image extractor (``tiles_zip``).

The full map is cut into a grid of equally sized source rectangles, each
scaled to the output tile size and encoded as PNG in the page. The archive
holds one ``<row><column>.png`` per tile (rows lettered from ``A``, columns
numbered from 1) plus ``schema.png``, the generator's debug rendering of the
tile layout.
"""

import base64
import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Dict, List

from ...core.domain import ExportResult
from ...core.exceptions import ExtractionError
from ...core.options import ExportOptions
from ...core.ports import GenerationSessionPort
from .base import BaseExtractor

logger = logging.getLogger(__name__)

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

SCHEMA_FILENAME = "schema.png"


def row_label(row: int) -> str:
    """Letter label of a tile row: A..Z, then AA, AB, ..."""
    first = ALPHABET[row // len(ALPHABET) - 1] if row >= len(ALPHABET) else ""
    return first + ALPHABET[row % len(ALPHABET)]


@dataclass
class TilePlan:
    """Source rectangles and output size of a tile grid"""
    tile_width: int
    tile_height: int
    output_width: int
    output_height: int
    tiles: List[Dict[str, int]] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [f"{tile['name']}.png" for tile in self.tiles]

    def rectangles(self) -> List[Dict[str, int]]:
        return [{key: tile[key] for key in ("x", "y", "w", "h")} for tile in self.tiles]


def plan_tiles(map_width: float, map_height: float, tiles_x: float, tiles_y: float, scale: float) -> TilePlan:
    """
    Lay out the tile grid over a map.

    Tile sizes are truncated to whole pixels and only complete tiles are
    emitted, so a remainder strip at the right or bottom edge is dropped.
    The output keeps the source tile's aspect ratio at ``map_width * scale``
    pixels wide.

    Raises:
        ExtractionError: If the map is too small for the requested grid
    """
    tile_width = int(map_width / tiles_x)
    tile_height = int(map_height / tiles_y)
    if tile_width <= 0 or tile_height <= 0:
        raise ExtractionError(
            f"Map of {map_width}x{map_height} is too small for {tiles_x}x{tiles_y} tiles",
            format_id="tiles_zip",
        )

    width = map_width * scale
    height = width * (tile_height / tile_width)
    plan = TilePlan(tile_width, tile_height, max(1, int(width)), max(1, int(height)))

    row, y = 0, 0
    while y + tile_height <= map_height:
        column, x = 1, 0
        while x + tile_width <= map_width:
            plan.tiles.append({
                "name": f"{row_label(row)}{column}",
                "x": x,
                "y": y,
                "w": tile_width,
                "h": tile_height,
            })
            x += tile_width
            column += 1
        y += tile_height
        row += 1
    return plan


def build_zip(entries: Dict[str, bytes]) -> bytes:
    """Zip archive with the given entries, in insertion order"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


class TilesZipExtractor(BaseExtractor):
    """Zip of PNG tiles plus the tile layout schema"""

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        file_base = await generation.file_base()
        map_width, map_height = await generation.map_size()
        plan = plan_tiles(map_width, map_height, options.tiles_x, options.tiles_y, options.tile_scale)

        schema_url = await generation.render_map_url("tiles", {"debug": True, "fullMap": True})
        schema = await generation.rasterize(schema_url, int(map_width), int(map_height), "image/png")

        tiles_url = await generation.render_map_url("tiles", {"fullMap": True})
        logger.debug(
            "Rendering %d tiles of %dx%d px scaled to %dx%d",
            len(plan.tiles), plan.tile_width, plan.tile_height, plan.output_width, plan.output_height,
        )
        encoded = await generation.render_tiles(tiles_url, plan.rectangles(), plan.output_width, plan.output_height)
        if len(encoded) != len(plan.tiles):
            raise ExtractionError(
                f"Expected {len(plan.tiles)} tiles, page rendered {len(encoded)}",
                format_id=self.format_id,
            )

        entries = {SCHEMA_FILENAME: base64.b64decode(schema)}
        for name, data in zip(plan.names, encoded):
            entries[name] = base64.b64decode(data)

        archive = build_zip(entries)
        return self.binary_result(file_base, base64.b64encode(archive).decode("ascii"))
