"""
Structured JSON extractors.

The generator stores per-cell data as parallel columns (one array per
attribute, indexed by cell id). The exports expand those columns into one
row object per cell so each row carries its id next to its attributes.

Variants:
    full       info, settings, shared tables, pack rows and grid rows
    minimal    info, settings, shared tables and the pack collections only
    packCells  info and pack rows
    gridCells  info and grid rows
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ...core.domain import ExportResult
from ...core.exceptions import ExtractionError
from ...core.formats import FormatSpec
from ...core.options import ExportOptions
from ...core.ports import GenerationSessionPort
from .base import BaseExtractor, to_json

MAP_DESCRIPTION = "Azgaar's Fantasy Map Generator output: azgaar.github.io/Fantasy-map-generator"

JSON_VARIANTS = ("full", "minimal", "packCells", "gridCells")

PACK_COLLECTIONS = (
    "features", "cultures", "burgs", "states", "provinces", "religions",
    "rivers", "markers", "routes", "zones",
)

MISSING = object()


def column_value(column: Any, index: int, default: Any = None) -> Any:
    """Value of a column at ``index``; object columns are keyed by the id as text"""
    if column is None:
        return default
    if isinstance(column, Mapping):
        return column.get(str(index), column.get(index, default))
    if 0 <= index < len(column):
        return column[index]
    return default


def expand_rows(ids: Iterable[int], columns: Mapping[str, Any], names: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Expand parallel columns into one row per id.

    Entries a column does not have are left out of the row, the way
    ``JSON.stringify`` drops undefined values; explicit nulls are kept.

    Args:
        ids: Row ids, in output order
        columns: Column name -> array (or id-keyed object)
        names: Columns to include, in output order

    Returns:
        ``[{"i": id, name: columns[name][id], ...}, ...]``
    """
    rows = []
    for row_id in ids:
        row = {"i": row_id}
        for name in names:
            value = column_value(columns.get(name), row_id, MISSING)
            if value is not MISSING:
                row[name] = value
        rows.append(row)
    return rows


def expand_vertices(vertices: Mapping[str, Any]) -> List[Dict[str, Any]]:
    points = vertices.get("p") or []
    return expand_rows(range(len(points)), vertices, ("p", "v", "c"))


def build_map_info(raw_info: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "version": raw_info.get("version"),
        "description": MAP_DESCRIPTION,
        "exportedAt": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "mapName": raw_info.get("mapName"),
        "width": raw_info.get("width"),
        "height": raw_info.get("height"),
        "seed": raw_info.get("seed"),
        "mapId": raw_info.get("mapId"),
    }


def build_pack_data(snapshot: Mapping[str, Any]) -> Dict[str, Any]:
    """Pack rows, vertices and collections from a pack snapshot"""
    cells = snapshot.get("cells") or {}
    names = [name for name in cells if name != "i"]
    data = {
        "cells": expand_rows(cells.get("i") or [], cells, names),
        "vertices": expand_vertices(snapshot.get("vertices") or {}),
    }
    data.update(snapshot.get("collections") or {})
    return data


def build_grid_data(snapshot: Mapping[str, Any]) -> Dict[str, Any]:
    """Grid rows, vertices and grid metadata from a grid snapshot"""
    cells = snapshot.get("cells") or {}
    names = [name for name in cells if name != "i"]
    data = {
        "cells": expand_rows(cells.get("i") or [], cells, names),
        "vertices": expand_vertices(snapshot.get("vertices") or {}),
    }
    data.update(snapshot.get("meta") or {})
    data["features"] = snapshot.get("features")
    return data


class StructuredJsonExtractor(BaseExtractor):
    """JSON document assembled from in-page aggregate state"""

    def __init__(self, spec: FormatSpec, variant: str):
        super().__init__(spec)
        if variant not in JSON_VARIANTS:
            raise ExtractionError(f"Unknown JSON variant: {variant}", format_id=spec.id)
        self.variant = variant

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        file_base = await generation.file_base()
        info = build_map_info(await generation.map_info())

        if self.variant == "packCells":
            payload = {"info": info, "cells": build_pack_data(await generation.pack_snapshot())}
        elif self.variant == "gridCells":
            payload = {"info": info, "cells": build_grid_data(await generation.grid_snapshot())}
        else:
            payload = await self._document(generation, info)

        return self.text_result(file_base, to_json(payload))

    async def _document(self, generation: GenerationSessionPort, info: Dict[str, Any]) -> Dict[str, Any]:
        settings = await generation.settings()
        tables = await generation.shared_tables()

        payload = {
            "info": info,
            "settings": settings,
            "mapCoordinates": tables.get("mapCoordinates"),
        }
        if self.variant == "minimal":
            collections = await generation.collections(PACK_COLLECTIONS)
            payload["pack"] = {name: collections.get(name) for name in PACK_COLLECTIONS}
        else:
            payload["pack"] = build_pack_data(await generation.pack_snapshot())
            payload["grid"] = build_grid_data(await generation.grid_snapshot())

        payload["biomesData"] = tables.get("biomesData")
        payload["notes"] = tables.get("notes")
        payload["nameBases"] = tables.get("nameBases")
        return payload
