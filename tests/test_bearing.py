import pytest

from zonegrid.analysis import BearingEstimator, circular_mean, initial_bearing
from zonegrid.analysis.bearing import road_bearings
from zonegrid.collectors import DisabledBearingSource
from zonegrid.collectors.tilequery import RoadLine, RoadSegment
from zonegrid.exceptions import ExternalServiceUnavailable

from .conftest import FakeBearingSource, REF_LAT, REF_LON


def angular_distance(a, b):
    diff = abs(a - b) % 360
    return min(diff, 360 - diff)


@pytest.mark.parametrize("bearings", [[2, 358], [1, 359], [358, 2, 0]])
def test_circular_mean_wraps_around_north(bearings):
    result = circular_mean(bearings)
    assert 0 <= result < 360
    assert angular_distance(result, 0) < 1e-6


def test_circular_mean_simple_values():
    assert circular_mean([90]) == pytest.approx(90)
    assert circular_mean([80, 100]) == pytest.approx(90)
    assert circular_mean([350, 10, 20]) == pytest.approx(6.7, abs=0.05)
    assert circular_mean([200, 220]) == pytest.approx(210)


def test_circular_mean_of_nothing_is_none():
    assert circular_mean([]) is None


@pytest.mark.parametrize("end, expected", [
    ((0.0, 0.01), 0.0),
    ((0.01, 0.0), 90.0),
    ((0.0, -0.01), 180.0),
    ((-0.01, 0.0), 270.0),
])
def test_initial_bearing_cardinal_directions(end, expected):
    segment = RoadSegment(start=(0.0, 0.0), end=end)
    assert angular_distance(initial_bearing(segment), expected) < 1e-6


def test_road_bearings_skips_repeated_vertices():
    road = RoadLine(coordinates=[(0.0, 0.0), (0.0, 0.0), (0.0, 0.01), (0.01, 0.01)])
    bearings = road_bearings([road])
    assert len(bearings) == 2
    assert angular_distance(bearings[0], 0) < 1e-6
    assert angular_distance(bearings[1], 90) < 0.01


def test_estimate_aggregates_every_segment():
    roads = [
        RoadLine(coordinates=[(REF_LON, REF_LAT), (REF_LON + 0.001, REF_LAT + 0.001)]),
        RoadLine(coordinates=[(REF_LON, REF_LAT), (REF_LON + 0.001, REF_LAT + 0.0011)]),
    ]
    source = FakeBearingSource(roads)

    bearing = BearingEstimator(source).estimate((REF_LON, REF_LAT), 800, 100)

    assert 30 < bearing < 45
    assert source.calls == [(REF_LAT, REF_LON, 800, 100)]


def test_estimate_without_roads_is_absent():
    assert BearingEstimator(FakeBearingSource([])).estimate((REF_LON, REF_LAT), 800, 100) is None


def test_estimate_with_disabled_source_is_absent():
    assert BearingEstimator(DisabledBearingSource()).estimate((REF_LON, REF_LAT), 800, 100) is None


def test_estimate_swallows_service_errors():
    source = FakeBearingSource(error=ExternalServiceUnavailable("HTTP 503"))
    assert BearingEstimator(source).estimate((REF_LON, REF_LAT), 800, 100) is None
