from __future__ import annotations

import pytest

from branch_discovery.discovery.models import DEFAULT_CUISINE, Branch, Coordinate
from branch_discovery.slots.normalizer import (
    canonical_time,
    normalize_branch,
    normalize_restaurant,
)

FALLBACK = ["15:30", "16:00", "16:30"]

RAW_SHAPES = {
    "strings": {"id": 1, "slots": ["18:00", "18:30"]},
    "objects": {"id": 2, "slots": [{"time": "18:00", "availableSeats": 4}, {"time": "18:30"}]},
    "nested": {"id": 3, "slots": [{"time": {"time": "19:00"}}, {"time": {"time": "19:30"}}]},
    "seat_availability": {
        "id": 4,
        "slots": [],
        "availableSlots": [{"time": "20:00", "seats": 6}, {"time": "20:30", "seats": 0}],
    },
    "no_data": {"id": 5, "latitude": 30.05, "longitude": 31.24},
    "all_corrupt": {"id": 6, "slots": [None, "25:99"]},
}


def _times(branch: Branch) -> list[str]:
    return [slot.time for slot in branch.slots]


class TestSlotShapes:
    def test_plain_strings(self):
        branch = normalize_branch({"id": 1, "slots": ["18:00", "9:30"]})
        assert _times(branch) == ["18:00", "09:30"]
        assert all(slot.available_seats is None for slot in branch.slots)

    def test_objects_pass_through_with_seats(self):
        branch = normalize_branch(RAW_SHAPES["objects"])
        assert _times(branch) == ["18:00", "18:30"]
        assert branch.slots[0].available_seats == 4

    def test_doubly_nested_objects_unwrapped(self):
        branch = normalize_branch(RAW_SHAPES["nested"])
        assert _times(branch) == ["19:00", "19:30"]

    def test_synthesised_from_available_slots(self):
        branch = normalize_branch(RAW_SHAPES["seat_availability"], FALLBACK)
        assert _times(branch) == ["20:00", "20:30"]
        assert [s.available_seats for s in branch.slots] == [6, 0]

    def test_server_field_names_in_available_slots(self):
        raw = {
            "id": 6,
            "availableSlots": [
                {"startTime": "20:30:00", "remainingSeats": 2},
                {"startTime": "21:00:00", "remainingSeats": 5, "isAvailable": False},
            ],
        }
        branch = normalize_branch(raw, FALLBACK)
        assert _times(branch) == ["20:30"]
        assert branch.slots[0].available_seats == 2

    def test_availability_map(self):
        branch = normalize_branch({"id": 7, "availability": {"18:00": 3, "18:30": -2}}, FALLBACK)
        assert _times(branch) == ["18:00", "18:30"]
        assert [s.available_seats for s in branch.slots] == [3, 0]

    def test_generated_when_no_slot_data(self):
        branch = normalize_branch(RAW_SHAPES["no_data"], FALLBACK)
        assert _times(branch) == FALLBACK

    def test_slots_list_never_missing(self):
        branch = normalize_branch({"id": 8})
        assert branch.slots == []


class TestCorruptEntries:
    def test_corrupt_entries_dropped_not_midnight(self):
        raw = {
            "id": 9,
            "slots": ["18:00", None, {"time": None}, {"time": 5}, "25:99", {"foo": "bar"}, ""],
        }
        branch = normalize_branch(raw, FALLBACK)
        assert _times(branch) == ["18:00"]
        assert "00:00" not in _times(branch)

    def test_all_corrupt_leaves_no_slots(self):
        raw = {
            "id": 10,
            "slots": [None, "nope"],
            "availableSlots": [{"time": "20:00", "seats": 2}],
        }
        branch = normalize_branch(raw, FALLBACK)
        assert branch.slots == []

    def test_empty_slots_list_still_falls_back(self):
        assert _times(normalize_branch({"id": 13, "slots": []}, FALLBACK)) == FALLBACK

    def test_unparsable_seats_omitted(self):
        branch = normalize_branch({"id": 11, "slots": [{"time": "18:00", "availableSeats": "lots"}]})
        assert branch.slots[0].available_seats is None

    def test_duplicate_times_keep_first(self):
        raw = {"id": 12, "slots": [{"time": "18:00", "availableSeats": 2}, "18:00", "18:30"]}
        branch = normalize_branch(raw)
        assert _times(branch) == ["18:00", "18:30"]
        assert branch.slots[0].available_seats == 2


@pytest.mark.parametrize("shape", sorted(RAW_SHAPES))
def test_normalize_is_idempotent(shape):
    once = normalize_branch(RAW_SHAPES[shape], FALLBACK)
    assert normalize_branch(once, FALLBACK) == once


def test_input_record_not_mutated():
    raw = {"id": 1, "slots": ["18:00"], "availableSlots": [{"time": "19:00", "seats": 1}]}
    normalize_branch(raw, FALLBACK)
    assert raw == {"id": 1, "slots": ["18:00"], "availableSlots": [{"time": "19:00", "seats": 1}]}


def test_canonical_time():
    assert canonical_time("7:05") == "07:05"
    assert canonical_time("18:00:00") == "18:00"
    assert canonical_time("7:05 PM") == "19:05"
    assert canonical_time("24:00") is None
    assert canonical_time(None) is None


# ── Branch / restaurant fields ───────────────────────────────────────────


class TestBranchFields:
    def test_coordinates_from_top_level_fields(self):
        branch = normalize_branch({"id": 1, "latitude": "30.05", "longitude": "31.24"})
        assert branch.coordinates == Coordinate(latitude=30.05, longitude=31.24)

    def test_zero_coordinates_are_missing(self):
        branch = normalize_branch({"id": 1, "latitude": 0, "longitude": 0, "distance": 3.5})
        assert branch.coordinates is None
        assert branch.distance_km is None

    def test_provided_distance_kept_with_coordinates(self):
        branch = normalize_branch({"id": 1, "latitude": 30.05, "longitude": 31.24, "distance": "3.5"})
        assert branch.distance_km == 3.5

    def test_branch_id_is_string(self):
        assert normalize_branch({"id": 42}).id == "42"
        assert normalize_branch({"branchId": 7}).id == "7"


class TestNormalizeRestaurant:
    def test_all_branches_normalised(self):
        raw = {
            "id": 1,
            "name": "Koshary Abou Tarek",
            "cuisine": "Egyptian",
            "priceRange": "$",
            "branches": [{"id": 10, "slots": ["18:00"]}, {"id": 11}],
        }
        restaurant = normalize_restaurant(raw, FALLBACK)
        assert restaurant.id == "1"
        assert restaurant.price_range == "$"
        assert _times(restaurant.branches[0]) == ["18:00"]
        assert _times(restaurant.branches[1]) == FALLBACK

    def test_missing_cuisine_gets_default(self):
        restaurant = normalize_restaurant({"id": 2, "name": "Mystery"})
        assert restaurant.cuisine == DEFAULT_CUISINE
        assert restaurant.branches == []

    def test_idempotent(self):
        raw = {"id": 3, "name": "X", "branches": [RAW_SHAPES["nested"], RAW_SHAPES["no_data"]]}
        once = normalize_restaurant(raw, FALLBACK)
        assert normalize_restaurant(once, FALLBACK) == once

    def test_slotless_branch_stays_slotless(self):
        raw = {"id": 4, "name": "Y", "branches": [RAW_SHAPES["all_corrupt"]]}
        once = normalize_restaurant(raw, FALLBACK)
        assert once.branches[0].slots == []
        assert normalize_restaurant(once, FALLBACK) == once
