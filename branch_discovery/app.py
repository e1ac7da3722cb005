from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import FastAPI

from .discovery.config import (
    CITY_OPTIONS,
    CUISINE_OPTIONS,
    DEFAULT_APP_CONFIG,
    DISTANCE_OPTIONS,
    PRICE_RANGE_OPTIONS,
)
from .discovery.engine import discover
from .discovery.models import DiscoveryRequest, DiscoveryResponse
from .slots.display import default_time_for_display, format_time_12h
from .slots.generator import slots_for_selection, smart_default_pick

app = FastAPI(title="Branch Discovery API", version="1.0.0")


def _resolve_now(now: datetime | None) -> datetime:
    """The only place that reads the clock; everything downstream gets ``now`` passed in."""
    if now is not None:
        return now
    return datetime.now(ZoneInfo(DEFAULT_APP_CONFIG.timezone))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "cities": CITY_OPTIONS,
        "cuisines": CUISINE_OPTIONS,
        "price_ranges": PRICE_RANGE_OPTIONS,
        "distances": DISTANCE_OPTIONS,
    }


# ── Time slots ───────────────────────────────────────────────────────────


@app.get("/time-slots")
def time_slots(
    now: datetime | None = None,
    date: str | None = None,
    time: str | None = None,
) -> dict:
    current = _resolve_now(now)
    slots = slots_for_selection(current, date, time)
    return {
        "slots": slots,
        "display": [format_time_12h(s) for s in slots],
        "default_display": default_time_for_display(current),
    }


@app.get("/time-slots/default-pick")
def default_pick(now: datetime | None = None) -> dict[str, str]:
    pick_date, pick_time = smart_default_pick(_resolve_now(now))
    return {"date": pick_date.isoformat(), "time": pick_time}


# ── Discovery ────────────────────────────────────────────────────────────


@app.post("/discover", response_model=DiscoveryResponse)
def discover_branches(body: DiscoveryRequest, now: datetime | None = None) -> DiscoveryResponse:
    return discover(body, _resolve_now(now))
