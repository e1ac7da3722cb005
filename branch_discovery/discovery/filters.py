from __future__ import annotations

import logging
import math
import re
from typing import Any

import pandas as pd

from .models import ALL, FilterCriteria

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def is_unset(value: Any) -> bool:
    """``None``, blank strings and the exact ``"all"`` sentinel mean "no filter"."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or value == ALL
    return False


def parse_max_distance(value: float | str | None) -> float | None:
    """Accept ``5``, ``5.0``, ``"5"`` or the UI label ``"5 km"``; anything else is no limit."""
    if is_unset(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER_RE.match(str(value))
        if not match:
            logger.warning("Ignoring unparsable distance filter: %r", value)
            return None
        number = float(match.group(1))
    if not math.isfinite(number) or number < 0:
        logger.warning("Ignoring invalid distance filter: %r", value)
        return None
    return number


def filter_mask(frame: pd.DataFrame, criteria: FilterCriteria) -> pd.Series:
    """
    Boolean mask of rows that pass every active criterion.

    Expects ``name``, ``cuisine``, ``city``, ``price_range``, ``distance_km``
    and ``is_saved`` columns. Rows with unknown distance always pass the
    distance filter.
    """
    mask = pd.Series(True, index=frame.index)

    if criteria.text and criteria.text.strip():
        needle = criteria.text.strip().lower()
        text_hit = pd.Series(False, index=frame.index)
        for column in ("name", "cuisine", "city"):
            text_hit = text_hit | frame[column].str.lower().str.contains(needle, regex=False)
        mask = mask & text_hit

    if not is_unset(criteria.city):
        mask = mask & (frame["city"] == criteria.city)

    if not is_unset(criteria.cuisine):
        mask = mask & (frame["cuisine"] == criteria.cuisine)

    if not is_unset(criteria.price_range):
        mask = mask & (frame["price_range"] == criteria.price_range)

    max_distance = parse_max_distance(criteria.max_distance_km)
    if max_distance is not None:
        mask = mask & (frame["distance_km"].isna() | (frame["distance_km"] <= max_distance))

    if criteria.saved_only:
        mask = mask & frame["is_saved"]

    return mask
