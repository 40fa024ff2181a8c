"""
Playwright implementation of the generation session port.

Each operation is one ``page.evaluate`` call against the generator's
globals (``pack``, ``grid``, ``getMapURL``, ``getCoordinates`` ...). Image
work stays in the page: decoding goes through ``Image.decode()`` and
encoding through ``canvas.toDataURL()``, so no codec runs in Python.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ...core.exceptions import ExtractionError
from ..extractors.structured_json import PACK_COLLECTIONS

logger = logging.getLogger(__name__)

PACK_CELL_COLUMNS = (
    "i", "v", "c", "p", "g", "h", "area", "f", "t", "haven", "harbor", "fl", "r",
    "conf", "biome", "s", "pop", "culture", "burg", "routes", "state", "religion",
    "province",
)
GRID_CELL_COLUMNS = ("i", "v", "c", "b", "f", "t", "h", "temp", "prec")
VERTEX_COLUMNS = ("p", "v", "c")

_CANVAS_HELPERS = """
  async function loadImage(url) {
    const img = new Image();
    img.src = url;
    await img.decode();
    return img;
  }
  function canvasToBase64(canvas, mimeType, quality) {
    const dataUrl = canvas.toDataURL(mimeType, quality);
    const comma = dataUrl.indexOf(",");
    return comma >= 0 ? dataUrl.slice(comma + 1) : dataUrl;
  }
"""

_COLUMN_HELPERS = """
  const list = column => (column && typeof column.length === "number" ? Array.from(column) : column);
  const pick = (source, keys) => Object.fromEntries(keys.map(key => [key, list(source[key])]));
"""

FILE_BASE_JS = '() => (typeof getFileName === "function" ? getFileName() : "map")'

MAP_SIZE_JS = "() => [graphWidth, graphHeight]"

MAP_INFO_JS = """() => ({
  version: VERSION,
  mapName: mapName.value,
  width: graphWidth,
  height: graphHeight,
  seed,
  mapId
})"""

SETTINGS_JS = """() => ({
  distanceUnit: distanceUnitInput.value,
  distanceScale,
  areaUnit: areaUnit.value,
  heightUnit: heightUnit.value,
  heightExponent: heightExponentInput.value,
  temperatureScale: temperatureScale.value,
  populationRate,
  urbanization,
  mapSize: mapSizeOutput.value,
  latitude: latitudeOutput.value,
  longitude: longitudeOutput.value,
  prec: precOutput.value,
  options: window.options,
  mapName: mapName.value,
  hideLabels: hideLabels.checked,
  stylePreset: stylePreset.value,
  rescaleLabels: rescaleLabels.checked,
  urbanDensity
})"""

SHARED_TABLES_JS = "() => ({mapCoordinates, biomesData, notes, nameBases})"

PACK_SNAPSHOT_JS = "({cellColumns, vertexColumns, collectionNames}) => {" + _COLUMN_HELPERS + """
  return {
    cells: pick(pack.cells, cellColumns),
    vertices: pick(pack.vertices, vertexColumns),
    collections: Object.fromEntries(collectionNames.map(name => [name, pack[name]]))
  };
}"""

GRID_SNAPSHOT_JS = "({cellColumns, vertexColumns}) => {" + _COLUMN_HELPERS + """
  return {
    cells: pick(grid.cells, cellColumns),
    vertices: pick(grid.vertices, vertexColumns),
    meta: {
      cellsDesired: grid.cellsDesired,
      spacing: grid.spacing,
      cellsY: grid.cellsY,
      cellsX: grid.cellsX,
      points: grid.points,
      boundary: grid.boundary,
      seed: grid.seed
    },
    features: pack.features
  };
}"""

COLLECTIONS_JS = "names => Object.fromEntries(names.map(name => [name, pack[name]]))"

NOTES_JS = "() => notes"

CELL_GEOMETRY_JS = """() => {
  const {cells, vertices} = pack;
  const ids = Array.from(cells.i);
  const column = source => ids.map(i => source[i]);
  return {
    i: ids,
    v: column(cells.v),
    vertices: vertices.p,
    height: ids.map(i => parseInt(getFriendlyHeight([...cells.p[i]]))),
    population: ids.map(i => {
      const [rural, urban] = getCellPopulation(i);
      return rn(rural + urban);
    }),
    type: ids.map(i => pack.features[cells.f[i]].type),
    biome: column(cells.biome),
    state: column(cells.state),
    province: column(cells.province),
    culture: column(cells.culture),
    religion: column(cells.religion),
    neighbors: column(cells.c)
  };
}"""

CONVERT_POINT_SETS_JS = "sets => sets.map(points => points.map(([x, y]) => getCoordinates(x, y, 4)))"

MEANDER_RIVERS_JS = "rivers => rivers.map(({cells, points}) => Rivers.addMeandering(cells, points))"

RENDER_MAP_URL_JS = "async ([kind, flags]) => await getMapURL(kind, flags)"

FETCH_TEXT_JS = "async url => await (await fetch(url)).text()"

RASTERIZE_JS = "async ({url, width, height, mimeType, quality}) => {" + _CANVAS_HELPERS + """
  const img = await loadImage(url);
  const canvas = document.createElement("canvas");
  canvas.width = width;
  canvas.height = height;
  canvas.getContext("2d").drawImage(img, 0, 0, canvas.width, canvas.height);
  return canvasToBase64(canvas, mimeType, quality);
}"""

RENDER_TILES_JS = "async ({url, tiles, width, height}) => {" + _CANVAS_HELPERS + """
  const img = await loadImage(url);
  const canvas = document.createElement("canvas");
  canvas.width = width;
  canvas.height = height;
  const ctx = canvas.getContext("2d");
  const encoded = [];
  for (const {x, y, w, h} of tiles) {
    ctx.clearRect(0, 0, canvas.width, canvas.height);
    ctx.drawImage(img, x, y, w, h, 0, 0, canvas.width, canvas.height);
    encoded.push(canvasToBase64(canvas, "image/png"));
  }
  return encoded;
}"""

GRID_HEIGHTS_JS = "() => ({heights: Array.from(grid.cells.h), cellsX: grid.cellsX, cellsY: grid.cellsY})"

ENCODE_GRAYSCALE_JS = "async ({values, columns, rows, width, height}) => {" + _CANVAS_HELPERS + """
  const tiny = document.createElement("canvas");
  tiny.width = columns;
  tiny.height = rows;
  const tinyCtx = tiny.getContext("2d");
  const imageData = tinyCtx.createImageData(columns, rows);
  values.forEach((value, i) => {
    const n = i * 4;
    imageData.data[n] = value;
    imageData.data[n + 1] = value;
    imageData.data[n + 2] = value;
    imageData.data[n + 3] = 255;
  });
  tinyCtx.putImageData(imageData, 0, 0);

  const img = await loadImage(tiny.toDataURL("image/png"));
  const canvas = document.createElement("canvas");
  canvas.width = width;
  canvas.height = height;
  canvas.getContext("2d").drawImage(img, 0, 0, width, height);
  return canvasToBase64(canvas, "image/png");
}"""

PREPARE_MAP_DATA_JS = """async () => {
  if (typeof prepareMapData !== "function") throw new Error("prepareMapData is not available");
  return await prepareMapData();
}"""


class PlaywrightGenerationSession:
    """Generation session backed by a loaded Playwright page"""

    def __init__(self, page: Page):
        self.page = page

    async def _evaluate(self, operation: str, script: str, arg: Any = None) -> Any:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as e:
            raise ExtractionError(f"In-page {operation} failed: {e.message}", operation=operation) from e

    async def file_base(self) -> str:
        return str(await self._evaluate("getFileName", FILE_BASE_JS) or "map")

    async def map_size(self) -> Tuple[float, float]:
        width, height = await self._evaluate("map size", MAP_SIZE_JS)
        return width, height

    async def map_info(self) -> Dict[str, Any]:
        return await self._evaluate("map info", MAP_INFO_JS)

    async def settings(self) -> Dict[str, Any]:
        return await self._evaluate("settings", SETTINGS_JS)

    async def shared_tables(self) -> Dict[str, Any]:
        return await self._evaluate("shared tables", SHARED_TABLES_JS)

    async def pack_snapshot(self) -> Dict[str, Any]:
        return await self._evaluate("pack snapshot", PACK_SNAPSHOT_JS, {
            "cellColumns": list(PACK_CELL_COLUMNS),
            "vertexColumns": list(VERTEX_COLUMNS),
            "collectionNames": list(PACK_COLLECTIONS),
        })

    async def grid_snapshot(self) -> Dict[str, Any]:
        return await self._evaluate("grid snapshot", GRID_SNAPSHOT_JS, {
            "cellColumns": list(GRID_CELL_COLUMNS),
            "vertexColumns": list(VERTEX_COLUMNS),
        })

    async def collections(self, names: Sequence[str]) -> Dict[str, Any]:
        return await self._evaluate("pack collections", COLLECTIONS_JS, list(names))

    async def notes(self) -> List[Dict[str, Any]]:
        return await self._evaluate("notes", NOTES_JS) or []

    async def cell_geometry(self) -> Dict[str, Any]:
        return await self._evaluate("cell geometry", CELL_GEOMETRY_JS)

    async def convert_point_sets(self, point_sets: Sequence[Sequence[Sequence[float]]]) -> List[List[Any]]:
        return await self._evaluate("getCoordinates", CONVERT_POINT_SETS_JS, [list(points) for points in point_sets])

    async def meander_rivers(self, rivers: Sequence[Dict[str, Any]]) -> List[List[List[float]]]:
        return await self._evaluate("Rivers.addMeandering", MEANDER_RIVERS_JS, list(rivers))

    async def render_map_url(self, kind: str, flags: Dict[str, Any]) -> str:
        logger.debug("Rendering %s map URL with %s", kind, flags)
        return await self._evaluate("getMapURL", RENDER_MAP_URL_JS, [kind, flags])

    async def fetch_text(self, url: str) -> str:
        return await self._evaluate("fetch", FETCH_TEXT_JS, url)

    async def rasterize(self, url: str, width: int, height: int, mime_type: str,
                        quality: Optional[float] = None) -> str:
        return await self._evaluate("rasterize", RASTERIZE_JS, {
            "url": url,
            "width": width,
            "height": height,
            "mimeType": mime_type,
            "quality": quality,
        })

    async def render_tiles(self, url: str, tiles: Sequence[Dict[str, Any]],
                           width: int, height: int) -> List[str]:
        return await self._evaluate("tile rendering", RENDER_TILES_JS, {
            "url": url,
            "tiles": list(tiles),
            "width": width,
            "height": height,
        })

    async def grid_heights(self) -> Dict[str, Any]:
        return await self._evaluate("grid heights", GRID_HEIGHTS_JS)

    async def encode_grayscale(self, values: Sequence[int], columns: int, rows: int,
                               width: int, height: int) -> str:
        return await self._evaluate("grayscale encoding", ENCODE_GRAYSCALE_JS, {
            "values": list(values),
            "columns": columns,
            "rows": rows,
            "width": width,
            "height": height,
        })

    async def prepare_map_data(self) -> str:
        return await self._evaluate("prepareMapData", PREPARE_MAP_DATA_JS)
