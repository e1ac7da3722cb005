from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeoConfig:
    """
    Distance and coordinate-plausibility settings.

    The bounding box defaults to Egypt; coordinates outside it are treated
    as missing rather than as far away.
    """

    earth_radius_km: float = 6371.0
    distance_digits: int = 2
    min_latitude: float = float(os.getenv("GEO_MIN_LATITUDE", "21.5"))
    max_latitude: float = float(os.getenv("GEO_MAX_LATITUDE", "32.0"))
    min_longitude: float = float(os.getenv("GEO_MIN_LONGITUDE", "24.5"))
    max_longitude: float = float(os.getenv("GEO_MAX_LONGITUDE", "37.0"))

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )


DEFAULT_GEO_CONFIG = GeoConfig()

# Covers the whole globe; useful when callers do not want region filtering.
WORLD_GEO_CONFIG = GeoConfig(
    min_latitude=-90.0,
    max_latitude=90.0,
    min_longitude=-180.0,
    max_longitude=180.0,
)
