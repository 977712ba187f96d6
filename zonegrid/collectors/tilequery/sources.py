"""
Road geometry sources for bearing estimation

A BearingSource hands back the road centerlines near a point. The live
implementation talks to Mapbox Tilequery; the disabled one is selected
when no access token is configured and always answers with no roads.
"""

from typing import List, Optional
from loguru import logger

from ...config import ZoneGridConfig
from ...exceptions import ExternalServiceUnavailable
from .api_client import TilequeryAPIClient
from .cache import TilequeryCache
from .models import RoadLine
from .parser import TilequeryResponseParser


class BearingSource:
    """Road geometry provider"""

    enabled = True

    def fetch_roads(self, lat: float, lon: float, radius_m: float, limit: int) -> List[RoadLine]:
        raise NotImplementedError


class DisabledBearingSource(BearingSource):
    """Stand-in used when the tile service is not configured"""

    enabled = False

    def fetch_roads(self, lat: float, lon: float, radius_m: float, limit: int) -> List[RoadLine]:
        return []


class TilequeryBearingSource(BearingSource):
    """
    Road centerlines from Mapbox Tilequery

    Supports caching raw responses to disk for debugging and reuse.
    """

    def __init__(self, api_client: TilequeryAPIClient, cache_dir: Optional[str] = None):
        self.api_client = api_client
        self.cache = TilequeryCache(cache_dir, layer=api_client.config.road_layer)
        self.parser = TilequeryResponseParser()

    def fetch_roads(self, lat: float, lon: float, radius_m: float, limit: int) -> List[RoadLine]:
        request = self.cache.request_key(lat, lon, radius_m, limit)
        cached = self.cache.get(request)
        if cached is not None:
            return self._parse(cached)

        data = self.api_client.query_roads(lat, lon, radius_m, limit)
        roads = self._parse(data)
        self.cache.put(request, data)
        logger.debug(f"Tilequery returned {len(data.get('features') or [])} features, {len(roads)} road lines")
        return roads

    def _parse(self, data) -> List[RoadLine]:
        try:
            return self.parser.parse_roads(data)
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            raise ExternalServiceUnavailable(f"Unexpected Tilequery payload: {e}") from e


def create_bearing_source(config: ZoneGridConfig) -> BearingSource:
    """Pick the live source when a token is configured, else the disabled one"""
    if not config.api.mapbox_token:
        logger.warning("No Mapbox token configured - zones will not be aligned to streets")
        return DisabledBearingSource()
    return TilequeryBearingSource(TilequeryAPIClient(config.api), cache_dir=config.cache_dir)
