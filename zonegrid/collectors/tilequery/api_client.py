"""
Mapbox Tilequery API client

Handles communication with the Tilequery endpoint. No retries: any
transport or HTTP error surfaces as ExternalServiceUnavailable and the
caller decides how to degrade.
"""

import requests
from typing import Dict, Any
from loguru import logger

from ...config import APIConfig
from ...exceptions import ExternalServiceUnavailable


class TilequeryAPIClient:
    """Client for the Mapbox Tilequery API"""

    def __init__(self, api_config: APIConfig, session: requests.Session = None):
        if not api_config.mapbox_token:
            raise ValueError("TilequeryAPIClient requires api.mapbox_token")
        self.config = api_config
        self.session = session or requests.Session()

    def query_roads(self, lat: float, lon: float, radius_m: float, limit: int) -> Dict[str, Any]:
        """
        Query road features around a point

        Args:
            lat: Center latitude
            lon: Center longitude
            radius_m: Search radius in meters
            limit: Maximum number of features returned

        Returns:
            JSON FeatureCollection from the Tilequery API

        Raises:
            ExternalServiceUnavailable: On timeout, transport or HTTP error
        """
        url = self.config.tilequery_url.format(lon=lon, lat=lat)
        params = {
            "layers": self.config.road_layer,
            "radius": int(round(radius_m)),
            "limit": limit,
            "access_token": self.config.mapbox_token,
        }
        headers = {"User-Agent": self.config.user_agent}

        logger.debug(f"Tilequery roads within {radius_m}m of ({lat:.6f}, {lon:.6f})")
        try:
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                timeout=self.config.request_timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise ExternalServiceUnavailable(f"Tilequery timeout after {self.config.request_timeout}s") from e
        except requests.exceptions.HTTPError as e:
            raise ExternalServiceUnavailable(f"Tilequery HTTP error {e.response.status_code}") from e
        except requests.exceptions.RequestException as e:
            raise ExternalServiceUnavailable(f"Tilequery request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceUnavailable(f"Tilequery returned invalid JSON: {e}") from e
