"""
Road bearing estimation

Derives one representative street orientation for a point from the road
centerlines a BearingSource returns around it.
"""

from typing import Iterable, List, Optional, Tuple

import numpy as np
from loguru import logger
from pyproj import Geod

from ..collectors.tilequery import BearingSource, RoadLine, RoadSegment
from ..exceptions import ExternalServiceUnavailable

GEOD = Geod(ellps="WGS84")


def initial_bearing(segment: RoadSegment) -> float:
    """Forward azimuth from start to end, degrees clockwise from north on [0, 360)"""
    (lon1, lat1), (lon2, lat2) = segment.start, segment.end
    azimuth, _, _ = GEOD.inv(lon1, lat1, lon2, lat2)
    return _normalize(azimuth)


def circular_mean(bearings: Iterable[float]) -> Optional[float]:
    """
    Mean of angles in degrees, via the average of their unit vectors.

    Bearings wrap at 360, so 1 and 359 average to 0 rather than 180.
    Returns None for an empty input.
    """
    radians = np.radians(np.asarray(list(bearings), dtype=float))
    if radians.size == 0:
        return None
    x = float(np.mean(np.cos(radians)))
    y = float(np.mean(np.sin(radians)))
    return _normalize(float(np.degrees(np.arctan2(y, x))))


def road_bearings(roads: Iterable[RoadLine]) -> List[float]:
    """Bearings of every non-degenerate segment of every road"""
    bearings = []
    for road in roads:
        for segment in road.segments():
            if segment.is_degenerate():
                continue
            bearing = initial_bearing(segment)
            if np.isfinite(bearing):
                bearings.append(bearing)
    return bearings


def _normalize(angle: float) -> float:
    # Rounding folds -1e-15 into 0 instead of 359.999...
    angle = round(angle, 9) % 360.0
    return 0.0 if angle >= 360.0 else angle


class BearingEstimator:
    """Estimate the dominant street bearing around a point"""

    def __init__(self, source: BearingSource):
        self.source = source

    def estimate(
        self,
        point: Tuple[float, float],
        search_radius_m: float,
        limit: int
    ) -> Optional[float]:
        """
        Circular mean of the road bearings near a point

        Args:
            point: (lon, lat) to search around
            search_radius_m: Search radius in meters
            limit: Maximum number of road features to request

        Returns:
            Bearing in degrees on [0, 360), or None when no road data is
            available (disabled source, no roads, or service failure)
        """
        lon, lat = point
        try:
            roads = self.source.fetch_roads(lat, lon, search_radius_m, limit)
        except ExternalServiceUnavailable as e:
            logger.warning(f"Road bearing fetch failed for ({lat:.6f}, {lon:.6f}): {e}")
            return None

        bearings = road_bearings(roads)
        if not bearings:
            return None
        return circular_mean(bearings)
