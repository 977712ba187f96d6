"""
Data structures for neighborhoods, zones and run summaries
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Literal
import uuid

from pydantic import BaseModel, Field
from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True)
class Neighborhood:
    """Named neighborhood boundary (Polygon or MultiPolygon, WGS84 lon/lat)"""
    name: str
    boundary: BaseGeometry


# ============================================================
# GeoJSON Types
# ============================================================

class GeoJSONPolygon(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]]  # [[[lon, lat], ...]]


# ============================================================
# Zone Models
# ============================================================

class Zone(BaseModel):
    """One gameplay cell inside a neighborhood"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    neighborhood_name: str
    boundary_coords: List[List[float]]  # Closed ring of [lon, lat]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_feature(self) -> Dict[str, Any]:
        """GeoJSON Feature for previews and exports"""
        return {
            "type": "Feature",
            "id": self.id,
            "properties": {
                "name": self.name,
                "neighborhood_name": self.neighborhood_name,
                "created_at": self.created_at.isoformat(),
            },
            "geometry": GeoJSONPolygon(coordinates=[self.boundary_coords]).model_dump(),
        }


class NeighborhoodSummary(BaseModel):
    name: str
    bearing: Optional[float] = None  # None -> grid left north-aligned
    candidate_cells: int = 0
    zone_count: int = 0


class RunResult(BaseModel):
    zones: List[Zone] = Field(default_factory=list)
    summaries: List[NeighborhoodSummary] = Field(default_factory=list)
    persisted: Optional[int] = None  # None on dry runs

    def to_feature_collection(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [zone.to_feature() for zone in self.zones],
        }
