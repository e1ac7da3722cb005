from __future__ import annotations

import math

from branch_discovery.discovery.models import Coordinate
from branch_discovery.geo.config import WORLD_GEO_CONFIG
from branch_discovery.geo.distance import (
    coordinate_from_record,
    distance_km,
    distances_km,
    sanitize_coordinate,
)

CAIRO = Coordinate(latitude=30.0444, longitude=31.2357)
ALEXANDRIA = Coordinate(latitude=31.2001, longitude=29.9187)


def test_distance_is_symmetric():
    assert distance_km(CAIRO, ALEXANDRIA) == distance_km(ALEXANDRIA, CAIRO)


def test_distance_to_self_is_zero():
    assert distance_km(CAIRO, CAIRO) == 0


def test_one_degree_of_latitude_at_equator():
    a = Coordinate(latitude=0.0, longitude=10.0)
    b = Coordinate(latitude=1.0, longitude=10.0)
    assert abs(distance_km(a, b) - 111.0) <= 1.0


def test_cairo_to_alexandria_is_plausible():
    assert 170 < distance_km(CAIRO, ALEXANDRIA) < 190


def test_distance_rounded_to_two_decimals():
    value = distance_km(CAIRO, ALEXANDRIA)
    assert round(value, 2) == value


def test_batch_matches_scalar():
    points = [ALEXANDRIA, CAIRO, Coordinate(latitude=30.1, longitude=31.3)]
    assert distances_km(CAIRO, points) == [distance_km(CAIRO, p) for p in points]


def test_batch_with_no_points():
    assert distances_km(CAIRO, []) == []


# ── Coordinate sanitising ────────────────────────────────────────────────


class TestSanitizeCoordinate:
    def test_valid_coordinate(self):
        coord = sanitize_coordinate(30.0444, 31.2357)
        assert coord == CAIRO

    def test_numeric_strings_are_parsed(self):
        coord = sanitize_coordinate("30.0444", "31.2357")
        assert coord == CAIRO

    def test_zero_zero_is_missing(self):
        assert sanitize_coordinate(0, 0) is None
        assert sanitize_coordinate(0.0, 0.0, WORLD_GEO_CONFIG) is None

    def test_outside_region_is_missing(self):
        assert sanitize_coordinate(48.8566, 2.3522) is None

    def test_world_config_accepts_anywhere(self):
        assert sanitize_coordinate(48.8566, 2.3522, WORLD_GEO_CONFIG) is not None

    def test_non_numeric_is_missing(self):
        assert sanitize_coordinate("abc", 31.2) is None
        assert sanitize_coordinate(None, 31.2) is None
        assert sanitize_coordinate(True, 31.2) is None

    def test_non_finite_is_missing(self):
        assert sanitize_coordinate(math.nan, 31.2) is None
        assert sanitize_coordinate(30.0, math.inf) is None


class TestCoordinateFromRecord:
    def test_nested_coordinates(self):
        record = {"coordinates": {"latitude": 30.0444, "longitude": 31.2357}}
        assert coordinate_from_record(record) == CAIRO

    def test_top_level_fields(self):
        assert coordinate_from_record({"latitude": 30.0444, "longitude": 31.2357}) == CAIRO

    def test_missing_record(self):
        assert coordinate_from_record(None) is None
        assert coordinate_from_record({"address": "somewhere"}) is None
