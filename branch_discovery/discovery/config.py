from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

CITY_OPTIONS: list[str] = ["Cairo", "Alexandria"]

CUISINE_OPTIONS: list[str] = [
    "Egyptian",
    "Italian",
    "Chinese",
    "Japanese",
    "Mexican",
    "Indian",
    "French",
    "Thai",
    "Mediterranean",
    "American",
    "Middle Eastern",
    "Greek",
    "Spanish",
    "Korean",
    "Vietnamese",
    "Turkish",
    "Seafood",
]

PRICE_RANGE_OPTIONS: list[str] = ["$", "$$", "$$$", "$$$$"]

DISTANCE_OPTIONS: list[str] = ["all", "1 km", "5 km", "10 km", "25 km"]


@dataclass(frozen=True)
class AppConfig:
    timezone: str = os.getenv("DISCOVERY_TIMEZONE", "Africa/Cairo")


DEFAULT_APP_CONFIG = AppConfig()
