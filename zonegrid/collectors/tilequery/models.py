"""
Road data models

Data classes for road geometries returned by the tile service
"""

from typing import List, Tuple, Iterator
from dataclasses import dataclass

LonLat = Tuple[float, float]


@dataclass(frozen=True)
class RoadSegment:
    """Two consecutive vertices of a road centerline"""
    start: LonLat
    end: LonLat

    def is_degenerate(self) -> bool:
        return self.start == self.end


@dataclass
class RoadLine:
    """Represents one road centerline as [lon, lat] vertices"""
    coordinates: List[LonLat]
    road_class: str = "road"

    def segments(self) -> Iterator[RoadSegment]:
        """Consecutive vertex pairs along the line"""
        for start, end in zip(self.coordinates, self.coordinates[1:]):
            yield RoadSegment(start=start, end=end)
