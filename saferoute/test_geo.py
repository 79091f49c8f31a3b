"""
Geodesy and polyline tests.

Tests:
  1. Distance symmetry and zero distance for identical points
  2. Known distances (1° of latitude, short north offsets)
  3. Bounding box size and containment
  4. Bearing / compass labels for the cardinal directions
  5. Polyline decoding of the reference example, round-trip, malformed and
     out-of-range input
  6. Display formatting of distances and durations

Run:  pytest saferoute/test_geo.py
"""

import math
import random

import pytest

from saferoute.errors import DecodeError
from saferoute.geo import (
    EARTH_RADIUS_M, bearing, bounding_box, center_of_coordinates, compass_direction,
    find_nearest_coordinate, format_distance, format_duration,
    haversine_distance_meters, is_within_bounds,
)
from saferoute.models import Coordinate
from saferoute.polyline import decode_polyline, encode_polyline


def C(lat, lng):
    return Coordinate(latitude=lat, longitude=lng)


# ─────────────────────────────────────────────────────────────────
# Distance
# ─────────────────────────────────────────────────────────────────

def test_distance_symmetry():
    rng = random.Random(7)
    for _ in range(200):
        a = C(rng.uniform(-80, 80), rng.uniform(-179, 179))
        b = C(rng.uniform(-80, 80), rng.uniform(-179, 179))
        assert haversine_distance_meters(a, b) == pytest.approx(haversine_distance_meters(b, a))
        assert haversine_distance_meters(a, a) == 0


def test_one_degree_latitude():
    d = haversine_distance_meters(C(0, 0), C(1, 0))
    assert d == pytest.approx(EARTH_RADIUS_M * math.pi / 180, rel=1e-9)
    assert 111_000 < d < 111_400


def test_short_offset_north():
    offset = math.degrees(99 / EARTH_RADIUS_M)
    assert haversine_distance_meters(C(28.6, 77.2), C(28.6 + offset, 77.2)) == pytest.approx(99, abs=1e-6)


def test_nan_propagates():
    assert math.isnan(haversine_distance_meters(C(0, 0), Coordinate.model_construct(latitude=float("nan"), longitude=0.0)))


# ─────────────────────────────────────────────────────────────────
# Bounds, bearing, helpers
# ─────────────────────────────────────────────────────────────────

def test_bounding_box_equator():
    box = bounding_box(C(0, 0), 111)
    assert box.minLat == pytest.approx(-1)
    assert box.maxLat == pytest.approx(1)
    assert box.minLng == pytest.approx(-1)
    assert box.maxLng == pytest.approx(1)


def test_bounding_box_widens_with_latitude():
    box = bounding_box(C(60, 10), 5)
    assert (box.maxLng - box.minLng) == pytest.approx(2 * (box.maxLat - box.minLat), rel=1e-6)
    assert is_within_bounds(C(60, 10), box)
    assert not is_within_bounds(C(60.5, 10), box)


@pytest.mark.parametrize("end, expected_deg, label", [
    ((1, 0), 0, "N"),
    ((0, 1), 90, "E"),
    ((-1, 0), 180, "S"),
    ((0, -1), 270, "W"),
])
def test_bearing_cardinal(end, expected_deg, label):
    b = bearing(C(0, 0), C(*end))
    assert b == pytest.approx(expected_deg, abs=1e-9)
    assert 0 <= b < 360
    assert compass_direction(b) == label


def test_compass_intercardinal_and_wrap():
    assert compass_direction(44) == "NE"
    assert compass_direction(135) == "SE"
    assert compass_direction(300) == "NW"
    assert compass_direction(359) == "N"


def test_center_and_nearest():
    coords = [C(0, 0), C(0, 2), C(2, 2)]
    center = center_of_coordinates(coords)
    assert center.latitude == pytest.approx(2 / 3)
    assert center.longitude == pytest.approx(4 / 3)
    assert center_of_coordinates([]) == C(0, 0)

    coord, dist, idx = find_nearest_coordinate(C(1.9, 2.1), coords)
    assert idx == 2 and coord == C(2, 2)
    assert dist == pytest.approx(haversine_distance_meters(C(1.9, 2.1), C(2, 2)))
    assert find_nearest_coordinate(C(0, 0), []) is None


def test_formatting():
    assert format_distance(0.85) == "850 m"
    assert format_distance(1.234) == "1.2 km"
    assert format_duration(1500) == "25 min"
    assert format_duration(3900) == "1h 5m"


# ─────────────────────────────────────────────────────────────────
# Polyline
# ─────────────────────────────────────────────────────────────────

def test_decode_reference_polyline():
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    expected = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
    assert len(points) == 3
    for p, (lat, lng) in zip(points, expected):
        assert p.latitude == pytest.approx(lat, abs=1e-9)
        assert p.longitude == pytest.approx(lng, abs=1e-9)


def test_encode_reference_polyline():
    coords = [C(38.5, -120.2), C(40.7, -120.95), C(43.252, -126.453)]
    assert encode_polyline(coords) == "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def test_polyline_round_trip_delhi():
    coords = [C(28.6139 + i * 0.00037, 77.2090 - i * 0.00021) for i in range(40)]
    decoded = decode_polyline(encode_polyline(coords))
    assert len(decoded) == len(coords)
    for a, b in zip(coords, decoded):
        assert abs(a.latitude - b.latitude) <= 1e-5
        assert abs(a.longitude - b.longitude) <= 1e-5


def test_decode_empty():
    assert decode_polyline("") == []


@pytest.mark.parametrize("bad", ["_p~iF~ps|", "_p~iF", "_p~iF~ps|U_"])
def test_decode_truncated_raises(bad):
    with pytest.raises(DecodeError):
        decode_polyline(bad)


def test_decode_invalid_character_raises():
    with pytest.raises(DecodeError):
        decode_polyline("_p~iF ps|U")


def test_decode_returns_fresh_list():
    first = decode_polyline("_p~iF~ps|U")
    first.append(C(0, 0))
    assert len(decode_polyline("_p~iF~ps|U")) == 1


def test_decode_out_of_range_point_raises():
    encoded = encode_polyline([Coordinate.model_construct(latitude=95.0, longitude=0.0)])
    with pytest.raises(DecodeError):
        decode_polyline(encoded)


@pytest.mark.parametrize("bad", [None, 42, b"_p~iF~ps|U"])
def test_decode_non_string_raises(bad):
    with pytest.raises(DecodeError):
        decode_polyline(bad)
