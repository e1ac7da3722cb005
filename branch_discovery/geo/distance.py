from __future__ import annotations

import math
from typing import Any

import numpy as np

from ..discovery.models import Coordinate
from .config import DEFAULT_GEO_CONFIG, GeoConfig


def haversine_km(
    lat1: Any,
    lon1: Any,
    lat2: Any,
    lon2: Any,
    radius_km: float = DEFAULT_GEO_CONFIG.earth_radius_km,
) -> np.ndarray:
    """Great-circle distance in km; accepts scalars or equal-length arrays."""
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = np.radians(np.asarray(lat2, dtype=float) - np.asarray(lat1, dtype=float))
    dlambda = np.radians(np.asarray(lon2, dtype=float) - np.asarray(lon1, dtype=float))
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return radius_km * c


def distance_km(a: Coordinate, b: Coordinate, config: GeoConfig = DEFAULT_GEO_CONFIG) -> float:
    """Haversine distance between two coordinates, rounded to 2 decimals."""
    value = haversine_km(
        a.latitude, a.longitude, b.latitude, b.longitude, radius_km=config.earth_radius_km
    )
    return round(float(value), config.distance_digits)


def distances_km(
    origin: Coordinate,
    points: list[Coordinate],
    config: GeoConfig = DEFAULT_GEO_CONFIG,
) -> list[float]:
    """Distances from ``origin`` to every point, computed in one vectorised pass."""
    if not points:
        return []
    lats = np.array([p.latitude for p in points], dtype=float)
    lons = np.array([p.longitude for p in points], dtype=float)
    values = haversine_km(
        origin.latitude, origin.longitude, lats, lons, radius_km=config.earth_radius_km
    )
    return [round(float(v), config.distance_digits) for v in values]


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def sanitize_coordinate(
    latitude: Any,
    longitude: Any,
    config: GeoConfig = DEFAULT_GEO_CONFIG,
) -> Coordinate | None:
    """
    Return a ``Coordinate`` or ``None`` when the pair is not a usable location.

    Numeric strings are accepted. Non-finite values, the exact ``(0, 0)``
    geocoding placeholder and points outside the configured region all count
    as "no coordinate".
    """
    lat = _to_float(latitude)
    lon = _to_float(longitude)
    if lat is None or lon is None:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if lat == 0.0 and lon == 0.0:
        return None
    if not config.contains(lat, lon):
        return None
    return Coordinate(latitude=lat, longitude=lon)


def coordinate_from_record(
    record: dict[str, Any] | None,
    config: GeoConfig = DEFAULT_GEO_CONFIG,
) -> Coordinate | None:
    """Read a coordinate from a nested ``coordinates`` object or top-level fields."""
    if not record:
        return None
    nested = record.get("coordinates")
    if isinstance(nested, Coordinate):
        return sanitize_coordinate(nested.latitude, nested.longitude, config)
    if isinstance(nested, dict):
        return sanitize_coordinate(nested.get("latitude"), nested.get("longitude"), config)
    return sanitize_coordinate(record.get("latitude"), record.get("longitude"), config)
