import json
from unittest import mock

import pytest
from shapely.geometry import Polygon
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import Insert

from zonegrid.analysis import LocalProjection
from zonegrid.collectors import DisabledBearingSource
from zonegrid.collectors.tilequery import RoadLine
from zonegrid.exceptions import ExternalServiceUnavailable, MalformedInput, PersistenceFailure, ResourceMissing
from zonegrid.pipeline import ZonePipeline

from .conftest import REF_LAT, REF_LON, FakeBearingSource, NoWaitThrottle, feature, square_lonlat, write_collection


def make_pipeline(config, source=None, throttle=None):
    return ZonePipeline(config, source=source or DisabledBearingSource(), throttle=throttle or NoWaitThrottle())


def zone_centroids(zones):
    projection = LocalProjection(REF_LON, REF_LAT)
    return [projection.to_local(Polygon(z.boundary_coords)).centroid for z in zones]


def test_one_km_square_without_bearing_service(config):
    result = make_pipeline(config).run()

    assert result.persisted == 16
    assert [z.name for z in result.zones] == [f"Elmwood - Zone {n}" for n in range(1, 17)]
    assert result.summaries[0].bearing is None
    assert result.summaries[0].candidate_cells == 16

    # Row-major: first row is the northernmost, west to east. The grid
    # overhangs the square by 60m per side, so edge zones are trimmed.
    centroids = zone_centroids(result.zones)
    assert [round(c.y) for c in centroids[:4]] == [390] * 4
    assert [round(c.x) for c in centroids[:4]] == [-390, -140, 140, 390]
    assert [round(c.y) for c in centroids[4:8]] == [140] * 4
    assert round(centroids[-1].y) == -390


def test_zones_are_closed_rings_with_positive_area(config):
    result = make_pipeline(config).run(dry_run=True)

    for zone in result.zones:
        assert zone.boundary_coords[0] == zone.boundary_coords[-1]
        assert Polygon(zone.boundary_coords).area > 0


def test_missing_bearing_means_no_rotation(config):
    pipeline = make_pipeline(config, source=FakeBearingSource([]))

    with mock.patch.object(pipeline.grid_generator, "generate", wraps=pipeline.grid_generator.generate) as generate:
        result = pipeline.run(dry_run=True)

    assert generate.call_args.args[2] is None
    projection = LocalProjection(REF_LON, REF_LAT)
    first = projection.to_local(Polygon(result.zones[0].boundary_coords))
    assert first.minimum_rotated_rectangle.area == pytest.approx(first.envelope.area, rel=1e-3)


def test_service_failure_does_not_abort_run(config):
    source = FakeBearingSource(error=ExternalServiceUnavailable("HTTP 503"))

    result = make_pipeline(config, source=source).run()

    assert result.persisted == 16
    assert result.summaries[0].bearing is None


def test_grid_is_rotated_to_road_bearing(config):
    # Two roads running north-east
    roads = [
        RoadLine(coordinates=[(REF_LON, REF_LAT), (REF_LON + 0.0134, REF_LAT + 0.01)]),
        RoadLine(coordinates=[(REF_LON - 0.01, REF_LAT - 0.01), (REF_LON + 0.0034, REF_LAT)]),
    ]
    throttle = NoWaitThrottle()

    result = make_pipeline(config, source=FakeBearingSource(roads), throttle=throttle).run(dry_run=True)

    bearing = result.summaries[0].bearing
    assert 40 < bearing < 50
    assert throttle.calls == 1
    assert result.zones
    for zone in result.zones:
        assert Polygon(zone.boundary_coords).area > 0


def test_throttle_gates_every_live_lookup(tmp_path, config):
    config.neighborhoods_path = write_collection(tmp_path / "three.geojson", [
        feature(square_lonlat(300, REF_LON + i * 0.01), name=f"N{i}") for i in range(3)
    ])
    throttle = NoWaitThrottle()
    source = FakeBearingSource([])

    make_pipeline(config, source=source, throttle=throttle).run(dry_run=True)

    assert throttle.calls == 3
    assert len(source.calls) == 3


def test_numbering_restarts_per_neighborhood_and_skips_dropped_cells(tmp_path, config):
    # L-shape: some cells of its bounding box fall outside and are dropped
    projection = LocalProjection(REF_LON, REF_LAT)
    l_shape = projection.to_wgs84(Polygon([(0, 0), (1000, 0), (1000, 300), (300, 300), (300, 1000), (0, 1000)]))
    config.neighborhoods_path = write_collection(tmp_path / "two.geojson", [
        feature(l_shape, LNAME="Elmwood"),
        feature(square_lonlat(500, REF_LON + 0.05), LNAME="Fox Point"),
    ])

    result = make_pipeline(config).run(dry_run=True)

    elmwood = [z for z in result.zones if z.neighborhood_name == "Elmwood"]
    fox_point = [z for z in result.zones if z.neighborhood_name == "Fox Point"]
    assert result.summaries[0].candidate_cells > len(elmwood)
    assert [z.name for z in elmwood] == [f"Elmwood - Zone {n}" for n in range(1, len(elmwood) + 1)]
    assert fox_point[0].name == "Fox Point - Zone 1"


def test_neighborhood_inside_a_single_cell(tmp_path, config):
    config.neighborhoods_path = write_collection(tmp_path / "tiny.geojson", [
        feature(square_lonlat(50), name="Pocket Park")
    ])

    result = make_pipeline(config).run(dry_run=True)

    assert [z.name for z in result.zones] == ["Pocket Park - Zone 1"]
    projection = LocalProjection(REF_LON, REF_LAT)
    assert projection.to_local(Polygon(result.zones[0].boundary_coords)).area == pytest.approx(2500, rel=1e-3)


def test_runs_are_deterministic(config):
    roads = [RoadLine(coordinates=[(REF_LON, REF_LAT), (REF_LON + 0.004, REF_LAT + 0.01)])]

    first = make_pipeline(config, source=FakeBearingSource(roads)).run()
    second = make_pipeline(config, source=FakeBearingSource(roads)).run()

    assert first.persisted == second.persisted
    assert [z.boundary_coords for z in first.zones] == [z.boundary_coords for z in second.zones]
    assert {z.id for z in first.zones}.isdisjoint({z.id for z in second.zones})


def test_rerun_replaces_previous_generation(config):
    first = make_pipeline(config).run()
    second = make_pipeline(config).run()

    stored = make_pipeline(config).store.list_zones()
    assert len(stored) == second.persisted == first.persisted
    assert {z.id for z in stored} == {z.id for z in second.zones}


def test_persistence_failure_keeps_previous_generation(config):
    first = make_pipeline(config).run()
    real_execute = Session.execute

    def fail_on_insert(self, statement, *args, **kwargs):
        if isinstance(statement, Insert):
            raise OperationalError(str(statement), {}, Exception("disk I/O error"))
        return real_execute(self, statement, *args, **kwargs)

    with mock.patch.object(Session, "execute", fail_on_insert):
        with pytest.raises(PersistenceFailure):
            make_pipeline(config).run()

    stored = make_pipeline(config).store.list_zones()
    assert {z.id for z in stored} == {z.id for z in first.zones}


def test_missing_input_fails_before_network(tmp_path, config):
    config.neighborhoods_path = str(tmp_path / "missing.geojson")
    source = FakeBearingSource([])

    with pytest.raises(ResourceMissing):
        make_pipeline(config, source=source).run()
    assert source.calls == []


def test_malformed_input_fails_before_store(tmp_path, config):
    path = tmp_path / "bad.geojson"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": [{"geometry": None}]}), encoding="utf-8")
    config.neighborhoods_path = str(path)
    store = mock.Mock()

    with pytest.raises(MalformedInput):
        ZonePipeline(config, source=DisabledBearingSource(), store=store, throttle=NoWaitThrottle()).run()
    store.replace_all.assert_not_called()


def test_out_of_range_latitude_fails_before_network(tmp_path, config):
    polar = Polygon([(-71.42, 95.0), (-71.41, 95.0), (-71.41, 95.01), (-71.42, 95.01)])
    config.neighborhoods_path = write_collection(tmp_path / "polar.geojson", [
        feature(square_lonlat(1000), LNAME="Elmwood"),
        feature(polar, LNAME="Beyond"),
    ])
    source = FakeBearingSource()

    with pytest.raises(MalformedInput, match="Beyond"):
        make_pipeline(config, source=source).run(dry_run=True)
    assert source.calls == []


def test_save_writes_feature_collection(tmp_path, config):
    pipeline = make_pipeline(config)
    result = pipeline.run(dry_run=True)

    output = tmp_path / "out" / "zones.geojson"
    pipeline.save(result, str(output))

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["type"] == "FeatureCollection"
    assert len(data["features"]) == 16
    assert data["features"][0]["properties"]["name"] == "Elmwood - Zone 1"
    assert data["features"][0]["geometry"]["type"] == "Polygon"
