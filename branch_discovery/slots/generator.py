from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta

from .config import DEFAULT_SLOT_CONFIG, SlotConfig

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(
    r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$",
)

# Picker pre-fill table: (hour upper bound, cap hour) for the "now + lead time" bands.
_LUNCH_BAND_END = 11
_AFTERNOON_BAND_END, _AFTERNOON_CAP = 15, 18
_EVENING_BAND_END, _EVENING_CAP = 20, 21
_LUNCH_DEFAULT = time(13, 0)
_LAST_DINNER = time(21, 0)


def format_hhmm(moment: datetime | time) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


def parse_time_of_day(value: str | None) -> time | None:
    """
    Parse ``"HH:MM"``, ``"H:MM"``, ``"HH:MM:SS"`` or ``"h:MM AM/PM"``.

    Returns ``None`` for anything else, including out-of-range values.
    """
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    meridiem = (match.group(4) or "").upper()

    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem == "PM" and hour < 12:
            hour += 12
        elif meridiem == "AM" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute)


def _floor_to_interval(moment: datetime, interval: int) -> datetime:
    return moment.replace(minute=(moment.minute // interval) * interval, second=0, microsecond=0)


def _ceil_to_interval(moment: datetime, interval: int) -> datetime:
    floored = _floor_to_interval(moment, interval)
    if floored.minute == moment.minute:
        return floored
    return floored + timedelta(minutes=interval)


def anchor_time(now: datetime, config: SlotConfig = DEFAULT_SLOT_CONFIG) -> datetime:
    """
    Reference instant for the default slot window.

    Late at night the anchor is noon of the next calendar day, otherwise
    ``now`` plus the lead time. Minutes are rounded down to the interval.
    """
    if config.is_late_night(now.hour):
        tomorrow = now.date() + timedelta(days=1)
        anchor = datetime.combine(
            tomorrow, time(config.next_day_anchor_hour, 0), tzinfo=now.tzinfo
        )
    else:
        anchor = now + timedelta(hours=config.lead_time_hours)
    return _floor_to_interval(anchor, config.interval_minutes)


def default_slots(now: datetime, config: SlotConfig = DEFAULT_SLOT_CONFIG) -> list[str]:
    """Symmetric window around the anchor: anchor - 30, anchor, anchor + 30."""
    anchor = anchor_time(now, config)
    step = timedelta(minutes=config.interval_minutes)
    first = -(config.window_size // 2)
    return [
        format_hhmm(anchor + step * offset)
        for offset in range(first, first + config.window_size)
    ]


def _align_tz(selected: datetime, now: datetime) -> datetime:
    if selected.tzinfo is None and now.tzinfo is not None:
        return selected.replace(tzinfo=now.tzinfo)
    if selected.tzinfo is not None and now.tzinfo is None:
        return selected.replace(tzinfo=None)
    return selected


def slots_from_time(
    selected: datetime,
    now: datetime,
    config: SlotConfig = DEFAULT_SLOT_CONFIG,
) -> list[str]:
    """
    Ascending window starting at the chosen time: t, t + 30, t + 60.

    A selection strictly in the past falls back to ``default_slots(now)``.
    """
    selected = _align_tz(selected, now)
    if selected < now:
        logger.info("Selected time %s is in the past, using default slots", selected.isoformat())
        return default_slots(now, config)

    step = timedelta(minutes=config.interval_minutes)
    return [format_hhmm(selected + step * offset) for offset in range(config.window_size)]


def _coerce_date(value: date | str | None, fallback: date) -> date | None:
    if value is None or value == "":
        return fallback
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def slots_for_selection(
    now: datetime,
    selected_date: date | str | None = None,
    selected_time: str | None = None,
    config: SlotConfig = DEFAULT_SLOT_CONFIG,
) -> list[str]:
    """
    Slots for whatever the user picked in the date/time picker.

    No time means default generation; an unparsable date or time is logged
    and also falls back to default generation.
    """
    if not selected_time:
        return default_slots(now, config)

    parsed_time = parse_time_of_day(selected_time)
    parsed_date = _coerce_date(selected_date, now.date())
    if parsed_time is None or parsed_date is None:
        logger.warning(
            "Could not parse selection date=%r time=%r, using default slots",
            selected_date,
            selected_time,
        )
        return default_slots(now, config)

    selected = datetime.combine(parsed_date, parsed_time, tzinfo=now.tzinfo)
    return slots_from_time(selected, now, config)


def smart_default_pick(now: datetime) -> tuple[date, str]:
    """
    Pre-fill value for the date/time picker, by part of the day:

    - before 11:00: today 13:00
    - 11:00-15:00: now + 2h, capped at 18:00
    - 15:00-20:00: now + 2h, capped at 21:00
    - 20:00-22:00: today 21:00
    - from 22:00: tomorrow 13:00

    Computed times are rounded up to the next half hour.
    """
    hour = now.hour
    today = now.date()

    if hour < _LUNCH_BAND_END:
        return today, format_hhmm(_LUNCH_DEFAULT)
    if hour < _EVENING_BAND_END:
        cap_hour = _AFTERNOON_CAP if hour < _AFTERNOON_BAND_END else _EVENING_CAP
        suggested = _ceil_to_interval(now + timedelta(hours=2), 30)
        cap = datetime.combine(today, time(cap_hour, 0), tzinfo=now.tzinfo)
        return today, format_hhmm(min(suggested, cap))
    if hour < DEFAULT_SLOT_CONFIG.late_night_start_hour:
        return today, format_hhmm(_LAST_DINNER)
    return today + timedelta(days=1), format_hhmm(_LUNCH_DEFAULT)
