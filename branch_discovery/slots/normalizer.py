"""
Slot normalisation.

Upstream payloads carry branch slots in several historical shapes:

* plain strings: ``["18:00", "18:30"]``
* objects: ``[{"time": "18:00"}]``, optionally with ``availableSeats``
* doubly nested objects: ``[{"time": {"time": "18:00"}}]``
* no ``slots`` at all, only seat availability in ``availableSlots``
  (``[{"time": "18:00", "seats": 4}]`` or ``startTime``/``remainingSeats``)
  or an ``availability`` map (``{"18:00": 4}``)

``normalize_branch`` is the single place that turns any of these into a
``Branch`` whose ``slots`` are canonical ``TimeSlot`` values. Entries whose
time cannot be resolved are dropped.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from ..discovery.models import DEFAULT_CUISINE, Branch, Restaurant, TimeSlot
from ..geo.config import DEFAULT_GEO_CONFIG, GeoConfig
from ..geo.distance import coordinate_from_record
from .generator import format_hhmm, parse_time_of_day

logger = logging.getLogger(__name__)

_SEAT_KEYS = ("availableSeats", "available_seats", "seats", "remainingSeats", "remaining_seats")


def canonical_time(value: Any) -> str | None:
    """``"9:30"`` -> ``"09:30"``, ``"18:00:00"`` -> ``"18:00"``; ``None`` if unparsable."""
    parsed = parse_time_of_day(value) if isinstance(value, str) else None
    return format_hhmm(parsed) if parsed is not None else None


def _seat_count(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return max(0, int(number))


def _first_seat_value(entry: dict[str, Any]) -> int | None:
    for key in _SEAT_KEYS:
        if entry.get(key) is not None:
            return _seat_count(entry[key])
    return None


def _resolve_entry(entry: Any) -> tuple[str | None, int | None]:
    if isinstance(entry, TimeSlot):
        return entry.time, entry.available_seats
    if isinstance(entry, str):
        return canonical_time(entry), None
    if not isinstance(entry, dict):
        return None, None

    raw_time = entry.get("time")
    seats = _first_seat_value(entry)
    if isinstance(raw_time, dict):
        if seats is None:
            seats = _first_seat_value(raw_time)
        raw_time = raw_time.get("time")
    return canonical_time(raw_time), seats


def _from_slot_entries(entries: Iterable[Any]) -> list[tuple[str, int | None]]:
    resolved: list[tuple[str, int | None]] = []
    for entry in entries:
        time_str, seats = _resolve_entry(entry)
        if time_str is None:
            logger.debug("Dropping slot with unresolvable time: %r", entry)
            continue
        resolved.append((time_str, seats))
    return resolved


def _from_available_slots(entries: Iterable[Any]) -> list[tuple[str, int | None]]:
    resolved: list[tuple[str, int | None]] = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("isAvailable") is False:
            continue
        time_str = canonical_time(entry.get("time") or entry.get("startTime"))
        if time_str is None:
            logger.debug("Dropping availability entry with unresolvable time: %r", entry)
            continue
        resolved.append((time_str, _first_seat_value(entry)))
    return resolved


def _from_availability_map(mapping: dict[str, Any]) -> list[tuple[str, int | None]]:
    resolved: list[tuple[str, int | None]] = []
    for raw_time, seats in mapping.items():
        time_str = canonical_time(raw_time)
        if time_str is not None:
            resolved.append((time_str, _seat_count(seats)))
    return resolved


def _dedupe(resolved: list[tuple[str, int | None]]) -> list[TimeSlot]:
    slots: list[TimeSlot] = []
    seen: set[str] = set()
    for time_str, seats in resolved:
        if time_str in seen:
            continue
        seen.add(time_str)
        slots.append(TimeSlot(time=time_str, available_seats=seats))
    return slots


def normalize_slots(raw: dict[str, Any], fallback_times: Iterable[str] = ()) -> list[TimeSlot]:
    """
    Resolve the canonical slot list of a raw branch record.

    A non-empty ``slots`` list is authoritative: its corrupt entries are
    dropped, possibly leaving no slots at all. The other sources and
    ``fallback_times`` are consulted only when ``slots`` is absent or empty.
    """
    entries = raw.get("slots")
    if isinstance(entries, list) and entries:
        return _dedupe(_from_slot_entries(entries))

    resolved: list[tuple[str, int | None]] = []
    available = raw.get("availableSlots") or raw.get("available_slots")
    if isinstance(available, list):
        resolved = _from_available_slots(available)

    if not resolved and isinstance(raw.get("availability"), dict):
        resolved = _from_availability_map(raw["availability"])

    if not resolved:
        resolved = _from_slot_entries(fallback_times)

    return _dedupe(resolved)


def _distance_value(raw: dict[str, Any]) -> float | None:
    for key in ("distanceKm", "distance_km", "distance"):
        value = raw.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(number) and number >= 0:
            return number
    return None


def normalize_branch(
    raw: dict[str, Any] | Branch,
    fallback_times: Iterable[str] = (),
    geo_config: GeoConfig = DEFAULT_GEO_CONFIG,
) -> Branch:
    """
    Build a canonical ``Branch`` from any supported raw shape.

    ``fallback_times`` are used only when the record has no usable slot or
    availability data. Normalising an already-normalised branch returns an
    equal branch.
    """
    if isinstance(raw, Branch):
        # Already canonical, including a branch left with no slots.
        raw = raw.model_dump(by_alias=True)
        fallback_times = ()

    coordinates = coordinate_from_record(raw, geo_config)
    branch_id = raw.get("id", raw.get("branchId", raw.get("branch_id")))
    return Branch(
        id=str(branch_id) if branch_id is not None else "",
        address=raw.get("address") or "",
        city=raw.get("city") or "",
        coordinates=coordinates,
        slots=normalize_slots(raw, fallback_times),
        distance_km=_distance_value(raw) if coordinates is not None else None,
        is_saved=bool(raw.get("isSaved", raw.get("is_saved", False))),
    )


def normalize_restaurant(
    raw: dict[str, Any] | Restaurant,
    fallback_times: Iterable[str] = (),
    geo_config: GeoConfig = DEFAULT_GEO_CONFIG,
) -> Restaurant:
    """Normalise a restaurant record and every one of its branches."""
    if isinstance(raw, Restaurant):
        raw = raw.model_dump(by_alias=True)
        fallback_times = ()

    fallback = list(fallback_times)
    branches = [
        normalize_branch(branch, fallback, geo_config)
        for branch in raw.get("branches") or []
        if isinstance(branch, (dict, Branch))
    ]
    return Restaurant(
        id=str(raw.get("id", "")),
        name=raw.get("name") or "",
        cuisine=raw.get("cuisine") or DEFAULT_CUISINE,
        price_range=raw.get("priceRange") or raw.get("price_range") or "",
        branches=branches,
        is_saved=bool(raw.get("isSaved", raw.get("is_saved", False))),
    )
