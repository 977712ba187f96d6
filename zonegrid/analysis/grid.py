"""
Square grid generation over a polygon's bounding box

Works on planar metric geometry (see LocalProjection).
"""

import math
from typing import List, Optional, Tuple

from shapely.affinity import rotate
from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

# Absorbs float noise so an extent of exactly N cells is not rounded up to N + 1
_EPSILON = 1e-9


class GridGenerator:
    """Build a rotated, polygon-masked square grid"""

    def generate(
        self,
        polygon: BaseGeometry,
        cell_size_km: float,
        rotation_degrees: Optional[float],
        pivot: Tuple[float, float]
    ) -> List[Polygon]:
        """
        Tile the bounding box of `polygon` with square cells

        The grid is centred on the bounding box and always covers it.
        Cells not intersecting `polygon` are dropped, then the remaining
        cells are rotated clockwise by `rotation_degrees` about `pivot`.

        Args:
            polygon: Mask geometry in meters
            cell_size_km: Cell side length
            rotation_degrees: Compass rotation; None means no rotation
            pivot: (x, y) rotation origin, normally the polygon centroid

        Returns:
            Cells in row-major order (north to south, west to east)
        """
        if cell_size_km <= 0:
            raise ValueError(f"cell_size_km must be positive, got {cell_size_km}")

        cell = cell_size_km * 1000.0
        minx, miny, maxx, maxy = polygon.bounds
        width, height = maxx - minx, maxy - miny

        columns = max(1, math.ceil(width / cell - _EPSILON))
        rows = max(1, math.ceil(height / cell - _EPSILON))
        west = minx + (width - columns * cell) / 2
        north = maxy - (height - rows * cell) / 2

        mask = prep(polygon)
        cells = []
        for row in range(rows):
            top = north - row * cell
            for column in range(columns):
                left = west + column * cell
                candidate = box(left, top - cell, left + cell, top)
                if mask.intersects(candidate):
                    cells.append(candidate)

        if rotation_degrees:
            # shapely rotates counter-clockwise; bearings turn clockwise
            cells = [rotate(c, -rotation_degrees, origin=pivot) for c in cells]
        return cells
