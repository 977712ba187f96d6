"""
Tilequery response parser

Parses Mapbox Tilequery FeatureCollections into RoadLine objects
"""

from typing import Dict, Any, List
from .models import RoadLine


class TilequeryResponseParser:
    """Parses Tilequery API responses"""

    @staticmethod
    def parse_roads(data: Dict[str, Any]) -> List[RoadLine]:
        """
        Extract road centerlines from a Tilequery response

        LineString features give one line, MultiLineString features one line
        per part. Points and lines with fewer than two vertices carry no
        direction and are skipped.

        Args:
            data: JSON response from the Tilequery API

        Returns:
            List of RoadLine objects
        """
        roads = []
        for feature in data.get("features") or []:
            geometry = feature.get("geometry") or {}
            road_class = (feature.get("properties") or {}).get("class", "road")
            geom_type = geometry.get("type")
            coordinates = geometry.get("coordinates") or []

            if geom_type == "LineString":
                parts = [coordinates]
            elif geom_type == "MultiLineString":
                parts = coordinates
            else:
                continue

            for part in parts:
                vertices = [(float(c[0]), float(c[1])) for c in part if len(c) >= 2]
                if len(vertices) >= 2:
                    roads.append(RoadLine(coordinates=vertices, road_class=road_class))

        return roads
