import json
from typing import List

import pytest
from shapely.geometry import box, mapping

from zonegrid.analysis import LocalProjection
from zonegrid.collectors import BearingSource
from zonegrid.collectors.tilequery import RoadLine
from zonegrid.config import ZoneGridConfig
from zonegrid.storage import ZoneStore, create_db_engine

# Providence, RI
REF_LON = -71.4128
REF_LAT = 41.8240


class FakeBearingSource(BearingSource):
    """Returns canned roads and records every query"""

    def __init__(self, roads: List[RoadLine] = None, error: Exception = None):
        self.roads = roads or []
        self.error = error
        self.calls = []

    def fetch_roads(self, lat, lon, radius_m, limit):
        self.calls.append((lat, lon, radius_m, limit))
        if self.error is not None:
            raise self.error
        return list(self.roads)


class NoWaitThrottle:
    def __init__(self):
        self.calls = 0

    def wait(self, min_interval_ms=None):
        self.calls += 1


def square_lonlat(side_m: float, ref_lon: float = REF_LON, ref_lat: float = REF_LAT):
    """A side_m x side_m square centred on the reference point, in lon/lat"""
    half = side_m / 2
    return LocalProjection(ref_lon, ref_lat).to_wgs84(box(-half, -half, half, half))


def write_collection(path, features) -> str:
    path.write_text(json.dumps({"type": "FeatureCollection", "features": features}), encoding="utf-8")
    return str(path)


def feature(geometry, **properties):
    return {"type": "Feature", "properties": properties, "geometry": mapping(geometry)}


@pytest.fixture
def square_file(tmp_path):
    """One 1km x 1km neighborhood called Elmwood"""
    return write_collection(tmp_path / "neighborhoods.geojson", [feature(square_lonlat(1000), LNAME="Elmwood")])


@pytest.fixture
def config(tmp_path, square_file):
    return ZoneGridConfig(
        neighborhoods_path=square_file,
        database_url=f"sqlite:///{tmp_path / 'zones.db'}",
    )


@pytest.fixture
def store(tmp_path):
    zone_store = ZoneStore(create_db_engine(f"sqlite:///{tmp_path / 'store.db'}"))
    zone_store.create_schema()
    return zone_store
