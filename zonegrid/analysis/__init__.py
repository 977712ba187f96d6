"""
Geometry analysis modules for the zone grid generator
"""

from .bearing import BearingEstimator, circular_mean, initial_bearing
from .grid import GridGenerator
from .clipper import Clipper
from .projection import LocalProjection

__all__ = [
    "BearingEstimator",
    "circular_mean",
    "initial_bearing",
    "GridGenerator",
    "Clipper",
    "LocalProjection",
]
