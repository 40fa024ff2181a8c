"""
GeoJSON extractors for cells, routes, rivers and markers.

Geometry is read from the page in map pixels and converted to map
coordinates in bulk through the generator's own ``getCoordinates``, so one
round trip converts every point of a collection.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ...core.domain import ExportResult
from ...core.exceptions import ExtractionError
from ...core.formats import FormatSpec
from ...core.options import ExportOptions
from ...core.ports import GenerationSessionPort
from .base import BaseExtractor, to_json
from .structured_json import column_value

logger = logging.getLogger(__name__)

GEOJSON_KINDS = ("cells", "routes", "rivers", "markers")

RIVER_PROPERTIES = ("source", "mouth", "parent", "basin", "widthFactor", "sourceWidth", "discharge", "name", "type")


def feature(geometry_type: str, coordinates: Any, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": geometry_type, "coordinates": coordinates},
        "properties": properties,
    }


def feature_collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": features}


def closed_ring(coordinates: Sequence[Any]) -> List[Any]:
    """Polygon ring with the first position repeated at the end"""
    ring = list(coordinates)
    if ring:
        ring.append(ring[0])
    return ring


def marker_properties(marker: Mapping[str, Any], note: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Marker feature properties.

    Note fields sit between the position and the styling fields and win over
    the marker's own values, so a marker with a note has ``id`` "marker<i>".
    """
    properties = {
        "id": marker.get("i"),
        "type": marker.get("type"),
        "icon": marker.get("icon"),
        "x": marker.get("x"),
        "y": marker.get("y"),
    }
    properties.update(note or {})
    properties["size"] = marker.get("size")
    properties["fill"] = marker.get("fill")
    properties["stroke"] = marker.get("stroke")
    return properties


class GeoJsonExtractor(BaseExtractor):
    """FeatureCollection of one kind of map entity"""

    def __init__(self, spec: FormatSpec, kind: str):
        super().__init__(spec)
        self.kind = kind

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        builders = {
            "cells": self._cells,
            "routes": self._routes,
            "rivers": self._rivers,
            "markers": self._markers,
        }
        builder = builders.get(self.kind)
        if builder is None:
            raise ExtractionError("Unknown GeoJSON kind", format_id=self.format_id, kind=self.kind)

        file_base = await generation.file_base()
        features = await builder(generation)
        logger.debug("Built %d %s features", len(features), self.kind)
        return self.text_result(file_base, to_json(feature_collection(features)))

    async def _cells(self, generation: GenerationSessionPort) -> List[Dict[str, Any]]:
        geometry = await generation.cell_geometry()
        [vertex_coordinates] = await generation.convert_point_sets([geometry.get("vertices") or []])

        features = []
        for index, cell_id in enumerate(geometry.get("i") or []):
            ring = [vertex_coordinates[vertex] for vertex in column_value(geometry.get("v"), index) or []]
            properties = {"id": cell_id}
            for name in ("height", "biome", "type", "population", "state", "province", "culture", "religion", "neighbors"):
                properties[name] = column_value(geometry.get(name), index)
            features.append(feature("Polygon", [closed_ring(ring)], properties))
        return features

    async def _routes(self, generation: GenerationSessionPort) -> List[Dict[str, Any]]:
        routes = (await generation.collections(["routes"])).get("routes") or []
        coordinates = await generation.convert_point_sets([route.get("points") or [] for route in routes])
        return [
            feature("LineString", line, {"id": route.get("i"), "group": route.get("group"), "name": route.get("name")})
            for route, line in zip(routes, coordinates)
        ]

    async def _rivers(self, generation: GenerationSessionPort) -> List[Dict[str, Any]]:
        rivers = (await generation.collections(["rivers"])).get("rivers") or []
        # A river needs at least two cells to form a line
        rivers = [river for river in rivers if river and len(river.get("cells") or []) >= 2]
        if not rivers:
            return []

        meandered = await generation.meander_rivers(
            [{"cells": river["cells"], "points": river.get("points")} for river in rivers]
        )
        coordinates = await generation.convert_point_sets(meandered)

        features = []
        for river, line in zip(rivers, coordinates):
            properties = {"id": river.get("i")}
            for name in RIVER_PROPERTIES:
                properties[name] = river.get(name)
            features.append(feature("LineString", line, properties))
        return features

    async def _markers(self, generation: GenerationSessionPort) -> List[Dict[str, Any]]:
        markers = (await generation.collections(["markers"])).get("markers") or []
        notes: Dict[str, Mapping[str, Any]] = {}
        for note in await generation.notes() or []:
            if isinstance(note, Mapping):
                notes.setdefault(note.get("id"), note)
        positions = await generation.convert_point_sets([[[marker.get("x"), marker.get("y")] for marker in markers]])
        points = positions[0] if positions else []

        return [
            feature("Point", point, marker_properties(marker, notes.get(f"marker{marker.get('i')}")))
            for marker, point in zip(markers, points)
        ]
