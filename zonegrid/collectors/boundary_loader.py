"""
Neighborhood boundary loader

Reads a GeoJSON FeatureCollection of named neighborhood polygons.
"""

import json
import math
import os
from typing import Any, Dict, List, Optional

from loguru import logger
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.validation import make_valid

from ..exceptions import MalformedInput, ResourceMissing
from ..models import Neighborhood

# Property keys tried in order when naming a neighborhood
NAME_FIELDS = ("LNAME", "name")
POLYGON_TYPES = ("Polygon", "MultiPolygon")
# WGS84 lon/lat extent (minx, miny, maxx, maxy)
WORLD_BOUNDS = (-180.0, -90.0, 180.0, 90.0)


class BoundaryLoader:
    """Load neighborhoods from a GeoJSON file"""

    def __init__(self, default_name: str = "Neighborhood"):
        self.default_name = default_name

    def load(self, path: str) -> List[Neighborhood]:
        """
        Load every feature of the collection as a Neighborhood

        Args:
            path: Path to a GeoJSON FeatureCollection

        Returns:
            Neighborhoods in file order

        Raises:
            ResourceMissing: If the file does not exist
            MalformedInput: If the content is not a usable FeatureCollection
        """
        if not os.path.isfile(path):
            raise ResourceMissing(f"Neighborhood GeoJSON not found at {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedInput(f"Could not parse {path}: {e}") from e
        except OSError as e:
            raise ResourceMissing(f"Could not read {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("features"), list):
            raise MalformedInput(f"{path} is not a GeoJSON FeatureCollection")

        neighborhoods = []
        for index, feature in enumerate(data["features"]):
            if not isinstance(feature, dict):
                raise MalformedInput(f"Feature #{index} is not an object")
            name = self.resolve_name(feature.get("properties"))
            boundary = self._parse_boundary(feature.get("geometry"), name, index)
            neighborhoods.append(Neighborhood(name=name, boundary=boundary))

        logger.info(f"Loaded {len(neighborhoods)} neighborhoods from {path}")
        return neighborhoods

    def resolve_name(self, properties: Optional[Dict[str, Any]]) -> str:
        """First non-blank name field, else the default label"""
        if not isinstance(properties, dict):
            return self.default_name
        for key in NAME_FIELDS:
            value = properties.get(key)
            if value is not None and str(value).strip():
                return str(value).strip()
        return self.default_name

    def _parse_boundary(self, geometry: Any, name: str, index: int) -> BaseGeometry:
        if not isinstance(geometry, dict) or geometry.get("type") not in POLYGON_TYPES:
            geom_type = geometry.get("type") if isinstance(geometry, dict) else None
            raise MalformedInput(f"Feature #{index} ({name}) has unsupported geometry {geom_type}")

        try:
            boundary = shape(geometry)
        except (ValueError, TypeError, IndexError, AttributeError, GEOSException) as e:
            raise MalformedInput(f"Feature #{index} ({name}) has invalid coordinates: {e}") from e

        if boundary.is_empty:
            raise MalformedInput(f"Feature #{index} ({name}) has an empty geometry")

        if not _within_world(boundary.bounds):
            raise MalformedInput(
                f"Feature #{index} ({name}) has coordinates outside lon/lat range: {boundary.bounds}"
            )

        if not boundary.is_valid:
            logger.warning(f"Repairing invalid boundary for {name}")
            boundary = _polygonal_part(make_valid(boundary))

        if boundary.is_empty or boundary.area <= 0:
            raise MalformedInput(f"Feature #{index} ({name}) has no polygonal area")
        return boundary


def _within_world(bounds) -> bool:
    minx, miny, maxx, maxy = bounds
    if not all(math.isfinite(v) for v in bounds):
        return False
    return (
        minx >= WORLD_BOUNDS[0] and miny >= WORLD_BOUNDS[1]
        and maxx <= WORLD_BOUNDS[2] and maxy <= WORLD_BOUNDS[3]
    )


def _polygonal_part(geometry: BaseGeometry) -> BaseGeometry:
    """Drop the points and lines make_valid can leave behind"""
    if isinstance(geometry, (Polygon, MultiPolygon)):
        return geometry
    parts = [g for g in getattr(geometry, "geoms", []) if isinstance(g, (Polygon, MultiPolygon))]
    return unary_union(parts) if parts else Polygon()
