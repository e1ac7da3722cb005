from __future__ import annotations

from datetime import datetime

from .config import DEFAULT_SLOT_CONFIG, SlotConfig
from .generator import anchor_time, parse_time_of_day


def format_time_12h(value: str | None) -> str:
    """
    Render ``"18:30"`` as ``"6:30 PM"``.

    Strings that already carry AM/PM, or that do not parse, are returned
    unchanged; ``None`` becomes an empty string.
    """
    if not value:
        return ""
    if "AM" in value.upper() or "PM" in value.upper():
        return value
    parsed = parse_time_of_day(value)
    if parsed is None:
        return value
    meridiem = "PM" if parsed.hour >= 12 else "AM"
    hour = parsed.hour % 12 or 12
    return f"{hour}:{parsed.minute:02d} {meridiem}"


def default_time_for_display(now: datetime, config: SlotConfig = DEFAULT_SLOT_CONFIG) -> str:
    anchor = anchor_time(now, config)
    return format_time_12h(f"{anchor.hour:02d}:{anchor.minute:02d}")


def _minutes(value: str) -> int | None:
    parsed = parse_time_of_day(value)
    if parsed is None:
        return None
    return parsed.hour * 60 + parsed.minute


def closest_slots(available: list[str], selected: str | None, count: int = 3) -> list[str]:
    """Return the ``count`` available times nearest to ``selected``."""
    if len(available) <= count:
        return list(available)

    target = _minutes(selected) if selected else None
    if target is None:
        return available[:count]

    scored = [(t, _minutes(t)) for t in available]
    ranked = sorted(
        (pair for pair in scored if pair[1] is not None),
        key=lambda pair: abs(pair[1] - target),
    )
    return [t for t, _ in ranked[:count]]
