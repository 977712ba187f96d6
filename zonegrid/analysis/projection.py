"""
Local metric projection around a neighborhood

Grid and clipping work happen in metres on a plane tangent to the
neighborhood centroid; zone rings are projected back to WGS84 lon/lat.
"""

from typing import List

import shapely
from pyproj import CRS, Transformer
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

WGS84 = "EPSG:4326"


class LocalProjection:
    """Azimuthal equidistant projection centred on a reference point"""

    def __init__(self, ref_lon: float, ref_lat: float):
        self.ref_lon = ref_lon
        self.ref_lat = ref_lat
        local_crs = CRS.from_proj4(
            f"+proj=aeqd +lat_0={ref_lat} +lon_0={ref_lon} +datum=WGS84 +units=m +no_defs"
        )
        self._forward = Transformer.from_crs(WGS84, local_crs, always_xy=True)
        self._inverse = Transformer.from_crs(local_crs, WGS84, always_xy=True)

    def to_local(self, geometry: BaseGeometry) -> BaseGeometry:
        """[lon, lat] degrees -> [x, y] meters"""
        return shapely.transform(geometry, self._forward.transform, interleaved=False)

    def to_wgs84(self, geometry: BaseGeometry) -> BaseGeometry:
        """[x, y] meters -> [lon, lat] degrees"""
        return shapely.transform(geometry, self._inverse.transform, interleaved=False)

    def ring_to_coords(self, ring: BaseGeometry, precision: int = 7) -> List[List[float]]:
        """Project a local ring back to WGS84 as a list of [lon, lat]"""
        projected = self.to_wgs84(ring)
        return [[round(x, precision), round(y, precision)] for x, y in projected.coords]

    def zone_coords(self, ring: BaseGeometry, cell: Polygon, precision: int = 7) -> List[List[float]]:
        """
        WGS84 coordinates for a clipped zone ring

        Slivers narrower than the output precision flatten to zero area once
        rounded; those zones take the ring of their whole cell instead.
        """
        coords = self.ring_to_coords(ring, precision)
        if Polygon(coords).area > 0:
            return coords
        return self.ring_to_coords(cell.exterior, precision)
