"""
On-disk store for Tilequery responses

Entries are filed under a digest of the request the client actually sends:
layer, point, whole-metre radius and feature limit. Each file keeps that
request next to the payload, and a file whose request does not match is
treated as a miss.
"""

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


class TilequeryCache:
    """Tilequery responses on disk, keyed by request"""

    def __init__(self, cache_dir: Optional[str] = None, layer: str = "road"):
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.layer = layer

    @property
    def enabled(self) -> bool:
        return self.cache_dir is not None

    def request_key(self, lat: float, lon: float, radius_m: float, limit: int) -> Dict[str, Any]:
        # radius is sent to the API in whole metres
        return {
            "layer": self.layer,
            "lon": round(lon, 7),
            "lat": round(lat, 7),
            "radius": int(round(radius_m)),
            "limit": int(limit),
        }

    def entry_path(self, request: Dict[str, Any]) -> Path:
        digest = hashlib.sha256(json.dumps(request, sort_keys=True).encode("utf-8")).hexdigest()
        return self.cache_dir / f"{self.layer}-{digest[:16]}.json"

    def get(self, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Stored response for the request, or None"""
        if not self.enabled:
            return None
        path = self.entry_path(request)
        if not path.is_file():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache entry {path.name}: {e}")
            return None
        if not isinstance(entry, dict) or entry.get("request") != request:
            logger.warning(f"Ignoring cache entry {path.name}: stored for a different request")
            return None
        logger.debug(f"Tilequery cache hit {path.name}")
        return entry.get("response")

    def put(self, request: Dict[str, Any], response: Dict[str, Any]):
        if not self.enabled:
            return
        path = self.entry_path(request)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps({"request": request, "response": response}), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write cache entry {path}: {e}")
