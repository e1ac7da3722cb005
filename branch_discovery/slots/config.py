from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SlotConfig:
    """Three-slot window and late-night rollover settings."""

    interval_minutes: int = 30
    lead_time_hours: int = 2
    window_size: int = 3
    late_night_start_hour: int = 22
    late_night_end_hour: int = 6
    next_day_anchor_hour: int = 12

    def is_late_night(self, hour: int) -> bool:
        return hour >= self.late_night_start_hour or hour < self.late_night_end_hour


DEFAULT_SLOT_CONFIG = SlotConfig()
