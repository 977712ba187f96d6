"""
Road data collection from Mapbox Tilequery

Components:
- API client: Tilequery HTTP communication
- Models: Data structures (RoadLine, RoadSegment)
- Parser: Response parsing
- Cache: Caching functionality
- Sources: Live and disabled bearing sources
"""

from .models import RoadLine, RoadSegment
from .sources import (
    BearingSource,
    DisabledBearingSource,
    TilequeryBearingSource,
    create_bearing_source,
)

__all__ = [
    "RoadLine",
    "RoadSegment",
    "BearingSource",
    "DisabledBearingSource",
    "TilequeryBearingSource",
    "create_bearing_source",
]
