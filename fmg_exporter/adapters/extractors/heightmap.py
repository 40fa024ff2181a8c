"""
Grayscale heightmap extractor (``heightmap_png``).
"""

import math
from typing import List, Sequence

from ...core.domain import ExportResult
from ...core.exceptions import ExtractionError
from ...core.options import ExportOptions
from ...core.ports import GenerationSessionPort
from .base import BaseExtractor

SEA_LEVEL = 20


def heightmap_gray(height: float) -> int:
    """
    Gray level (0-255) of a grid cell height.

    Heights below sea level are compressed by 1.5 so water stays darker than
    land. Values are rounded and clamped the way a canvas pixel buffer stores
    them.
    """
    if height is None or not math.isfinite(height):
        return 0
    if height < SEA_LEVEL:
        height = max(height / 1.5, 0)
    return min(255, max(0, round(height / 100 * 255)))


def heightmap_values(heights: Sequence[float]) -> List[int]:
    return [heightmap_gray(height) for height in heights]


class HeightmapExtractor(BaseExtractor):
    """One gray pixel per grid cell, scaled up to the map size"""

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        file_base = await generation.file_base()
        grid = await generation.grid_heights()
        columns, rows = grid.get("cellsX"), grid.get("cellsY")
        heights = grid.get("heights") or []
        if not columns or not rows:
            raise ExtractionError("Grid dimensions are not available", format_id=self.format_id)

        map_width, map_height = await generation.map_size()
        data = await generation.encode_grayscale(
            heightmap_values(heights), int(columns), int(rows), int(map_width), int(map_height)
        )
        return self.binary_result(file_base, data)
