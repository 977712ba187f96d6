"""
Clip grid cells against a neighborhood boundary
"""

from typing import Optional

from shapely.geometry import LinearRing, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep


class Clipper:
    """
    Keep cells whose centroid lies in the boundary and trim them to it.

    The centroid test is deliberately coarse: a cell mostly inside the
    boundary is still dropped when its centroid falls outside.
    """

    def __init__(self, polygon: BaseGeometry):
        self.polygon = polygon
        self._prepared = prep(polygon)

    def clip(self, cell: Polygon) -> Optional[LinearRing]:
        """
        Boundary ring of the cell trimmed to the polygon

        Returns None when the cell centroid is outside the polygon. When the
        intersection degenerates (empty or zero area) the untouched cell ring
        is returned instead.
        """
        if not self._prepared.covers(cell.centroid):
            return None

        part = _largest_polygon(cell.intersection(self.polygon))
        if part is None or part.area <= 0:
            return cell.exterior
        return part.exterior


def clip(cell: Polygon, polygon: BaseGeometry) -> Optional[LinearRing]:
    return Clipper(polygon).clip(cell)


def _largest_polygon(geometry: BaseGeometry) -> Optional[Polygon]:
    if geometry.is_empty:
        return None
    if isinstance(geometry, Polygon):
        return geometry
    if isinstance(geometry, MultiPolygon):
        parts = list(geometry.geoms)
    else:
        # GeometryCollection: keep only areal members
        parts = []
        for member in getattr(geometry, "geoms", []):
            if isinstance(member, Polygon):
                parts.append(member)
            elif isinstance(member, MultiPolygon):
                parts.extend(member.geoms)
    if not parts:
        return None
    return max(parts, key=lambda p: p.area)
