"""
Image extractors: full-map SVG and PNG/JPEG rasters.

Both request the generator's own full-map rendering. Rasters are decoded and
re-encoded by the page's canvas at the requested resolution.
"""

import logging
import math

from ...core.domain import ExportResult
from ...core.options import ExportOptions
from ...core.ports import GenerationSessionPort
from .base import BaseExtractor

logger = logging.getLogger(__name__)


class SvgExtractor(BaseExtractor):
    """Full-map SVG text"""

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        file_base = await generation.file_base()
        url = await generation.render_map_url("svg", options.svg_flags())
        text = await generation.fetch_text(url)
        return self.text_result(file_base, text)


def raster_size(width: float, height: float, resolution: float):
    """Canvas size for a raster export (halves round up), never smaller than 1x1"""
    return (
        max(1, math.floor(width * resolution + 0.5)),
        max(1, math.floor(height * resolution + 0.5)),
    )


class RasterExtractor(BaseExtractor):
    """Full-map PNG or JPEG re-encoded through a canvas"""

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        file_base = await generation.file_base()
        url = await generation.render_map_url("png", options.svg_flags())
        map_width, map_height = await generation.map_size()
        width, height = raster_size(map_width, map_height, options.resolution)

        # PNG is lossless; the quality argument only matters for JPEG
        quality = options.quality if self.spec.mime_type == "image/jpeg" else None
        logger.debug("Rasterizing %s at %dx%d (resolution %s)", self.spec.mime_type, width, height, options.resolution)
        data = await generation.rasterize(url, width, height, self.spec.mime_type, quality)
        return self.binary_result(file_base, data)
