"""
Street-aligned zone grid generator

Partitions neighborhood polygons into small square zones rotated to the
local street bearing and stores them as one atomic generation.
"""

from .config import ZoneGridConfig, APIConfig, load_config, validate_config
from .exceptions import (
    ZoneGridError,
    ResourceMissing,
    MalformedInput,
    ExternalServiceUnavailable,
    PersistenceFailure,
)
from .models import Neighborhood, Zone, NeighborhoodSummary, RunResult
from .pipeline import ZonePipeline

__version__ = "1.0.0"

__all__ = [
    "ZoneGridConfig",
    "APIConfig",
    "load_config",
    "validate_config",
    "ZoneGridError",
    "ResourceMissing",
    "MalformedInput",
    "ExternalServiceUnavailable",
    "PersistenceFailure",
    "Neighborhood",
    "Zone",
    "NeighborhoodSummary",
    "RunResult",
    "ZonePipeline",
]
