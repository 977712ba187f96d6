"""
Configuration settings for the zone grid generator
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

from dotenv import load_dotenv
from loguru import logger


@dataclass
class APIConfig:
    """Mapbox Tilequery endpoint and request settings"""
    tilequery_url: str = "https://api.mapbox.com/v4/mapbox.mapbox-streets-v8/tilequery/{lon},{lat}.json"
    road_layer: str = "road"

    # Access token; None disables bearing estimation (zones stay north-aligned)
    mapbox_token: Optional[str] = None

    # Request settings
    request_timeout: int = 30
    min_request_interval_ms: int = 150  # Spacing between Tilequery calls

    # User agent for API requests
    user_agent: str = "ZoneGrid/1.0"


@dataclass
class ZoneGridConfig:
    """Pipeline configuration"""
    # Neighborhood boundaries (GeoJSON FeatureCollection)
    neighborhoods_path: str = "data/neighborhoods.geojson"

    # SQLAlchemy database URL for the zones table
    database_url: str = "sqlite:///zones.db"

    # Grid cell side (~280m city blocks)
    cell_size_km: float = 0.28

    # Road search around each neighborhood centroid
    search_radius_m: float = 800.0
    road_limit: int = 100

    # Label used when a feature carries no usable name
    default_neighborhood_name: str = "Neighborhood"

    # Optional directory for raw Tilequery responses
    cache_dir: Optional[str] = None

    # API config
    api: APIConfig = field(default_factory=APIConfig)


def _load_env_file() -> None:
    """Load the first .env found in the usual places without overriding the environment"""
    env_paths = [
        Path.cwd() / ".env",  # Current working directory
        Path(__file__).parent.parent / ".env",  # Project root
        Path.cwd().parent / ".env",  # Monorepo root
    ]
    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path, override=False)
            logger.info(f"Loaded .env file from {env_path}")
            return
    logger.debug("No .env file found in common locations")


def load_config(**overrides) -> ZoneGridConfig:
    """
    Build a configuration from defaults, .env and process environment.

    Keyword overrides (e.g. from CLI flags) win over the environment; None
    values are ignored.
    """
    _load_env_file()

    config = ZoneGridConfig()
    token = (
        os.getenv("MAPBOX_ACCESS_TOKEN")
        or os.getenv("MAPBOX_TOKEN")
        or os.getenv("VITE_MAPBOX_TOKEN")
    )
    config.api.mapbox_token = token or None
    config.database_url = os.getenv("DATABASE_URL", config.database_url)
    config.neighborhoods_path = os.getenv("NEIGHBORHOODS_PATH", config.neighborhoods_path)

    for key, value in overrides.items():
        if value is None:
            continue
        if not hasattr(config, key):
            raise ValueError(f"Unknown configuration key: {key}")
        setattr(config, key, value)

    validate_config(config)
    return config


def validate_config(config: ZoneGridConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    if not config.neighborhoods_path:
        errors.append("neighborhoods_path is required but not set")

    if not config.database_url:
        errors.append("database_url is required but not set")

    if config.cell_size_km is None or config.cell_size_km <= 0:
        errors.append(f"cell_size_km must be positive, got {config.cell_size_km}")

    if config.search_radius_m is None or config.search_radius_m <= 0:
        errors.append(f"search_radius_m must be positive, got {config.search_radius_m}")

    if config.road_limit is None or config.road_limit < 1:
        errors.append(f"road_limit must be at least 1, got {config.road_limit}")

    if not config.default_neighborhood_name:
        errors.append("default_neighborhood_name is required but not set")

    if config.api is None:
        errors.append("api configuration is required but not set")
    else:
        if not config.api.tilequery_url:
            errors.append("api.tilequery_url is required but not set")
        if config.api.min_request_interval_ms is None or config.api.min_request_interval_ms < 0:
            errors.append(f"api.min_request_interval_ms must be >= 0, got {config.api.min_request_interval_ms}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
