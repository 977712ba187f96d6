"""
Data collectors for the zone grid generator

- BoundaryLoader: Neighborhood polygons from a GeoJSON file
- Tilequery sources: Road centerlines from Mapbox for bearing estimation
"""

from .boundary_loader import BoundaryLoader
from .tilequery import (
    BearingSource,
    DisabledBearingSource,
    TilequeryBearingSource,
    create_bearing_source,
)

__all__ = [
    "BoundaryLoader",
    "BearingSource",
    "DisabledBearingSource",
    "TilequeryBearingSource",
    "create_bearing_source",
]
