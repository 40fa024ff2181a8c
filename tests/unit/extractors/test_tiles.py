"""
Unit tests for the tiles extractor.
"""

import base64
import io
import zipfile

import pytest

from fmg_exporter.adapters.extractors.tiles import TilesZipExtractor, plan_tiles, row_label
from fmg_exporter.core.exceptions import ExtractionError
from fmg_exporter.core.formats import get_format
from fmg_exporter.core.options import ExportOptions


class TestRowLabel:
    @pytest.mark.parametrize("row,label", [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (49, "AX")])
    def test_labels(self, row, label):
        assert row_label(row) == label


class TestPlanTiles:
    def test_default_grid(self):
        plan = plan_tiles(960, 540, 2, 2, 1)

        assert (plan.tile_width, plan.tile_height) == (480, 270)
        assert (plan.output_width, plan.output_height) == (960, 540)
        assert plan.names == ["A1.png", "A2.png", "B1.png", "B2.png"]
        assert plan.rectangles()[3] == {"x": 480, "y": 270, "w": 480, "h": 270}

    def test_remainder_strip_is_dropped(self):
        plan = plan_tiles(1000, 500, 3, 1, 1)

        assert plan.tile_width == 333
        assert [tile["x"] for tile in plan.tiles] == [0, 333, 666]

    def test_output_keeps_tile_aspect_ratio(self):
        plan = plan_tiles(1000, 500, 2, 4, 0.5)

        assert (plan.tile_width, plan.tile_height) == (500, 125)
        assert plan.output_width == 500
        assert plan.output_height == 125

    def test_fractional_tile_counts(self):
        plan = plan_tiles(100, 100, 2.5, 1, 1)

        assert plan.tile_width == 40
        assert plan.names == ["A1.png", "A2.png"]

    def test_map_too_small(self):
        with pytest.raises(ExtractionError):
            plan_tiles(10, 10, 50, 1, 1)


class TestTilesZipExtractor:
    @pytest.mark.asyncio
    async def test_archive_contents(self, generation, default_options):
        result = await TilesZipExtractor(get_format("tiles_zip")).extract(generation, default_options)

        assert result.filename == "Testland_2024-01-01-10-00.zip"
        assert result.is_binary
        archive = zipfile.ZipFile(io.BytesIO(base64.b64decode(result.data)))
        assert archive.namelist() == ["schema.png", "A1.png", "A2.png", "B1.png", "B2.png"]
        assert archive.read("schema.png") == b"image/png:960x540"
        assert archive.read("A1.png") == b"tile-0"
        assert archive.read("B2.png") == b"tile-3"

    @pytest.mark.asyncio
    async def test_schema_and_tiles_use_their_own_renderings(self, generation, default_options):
        await TilesZipExtractor(get_format("tiles_zip")).extract(generation, default_options)

        assert generation.called("render_map_url") == [
            ("tiles", {"debug": True, "fullMap": True}),
            ("tiles", {"fullMap": True}),
        ]
        tiles_call = generation.called("render_tiles")[0]
        assert tiles_call["url"] == "blob:tiles/2"
        assert (tiles_call["width"], tiles_call["height"]) == (960, 540)

    @pytest.mark.asyncio
    async def test_options_shape_the_grid(self, generation):
        options = ExportOptions.from_mapping({"tilesX": 3, "tilesY": 1, "tileScale": 0.5})

        result = await TilesZipExtractor(get_format("tiles_zip")).extract(generation, options)

        archive = zipfile.ZipFile(io.BytesIO(base64.b64decode(result.data)))
        assert archive.namelist() == ["schema.png", "A1.png", "A2.png", "A3.png"]
        tiles_call = generation.called("render_tiles")[0]
        assert tiles_call["width"] == 480
        assert tiles_call["height"] == 810
