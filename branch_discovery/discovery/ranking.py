from __future__ import annotations

import logging
from typing import Iterable

import numpy as np
import pandas as pd

from .filters import filter_mask
from .models import DisplayRow, FilterCriteria, Restaurant, SavedKey

logger = logging.getLogger(__name__)

# Most significant first: saved, nearest, favorite cuisine, name, input order.
_SORT_COLUMNS = ["is_saved", "distance_km", "is_favorite", "name", "position"]
_SORT_ASCENDING = [False, True, False, True, True]


def _stamp_restaurant(
    restaurant: Restaurant,
    saved_set: set[SavedKey],
    authoritative: bool,
) -> Restaurant:
    branches = [
        branch.model_copy(
            update={
                "is_saved": branch.is_saved
                or authoritative
                or (restaurant.id, index) in saved_set
            }
        )
        for index, branch in enumerate(restaurant.branches)
    ]
    return restaurant.model_copy(
        update={"branches": branches, "is_saved": any(b.is_saved for b in branches)}
    )


def flatten_rows(
    restaurants: Iterable[Restaurant],
    saved_set: set[SavedKey] | None = None,
    authoritative: bool = False,
) -> list[DisplayRow]:
    """
    One row per (restaurant, branch), with saved status stamped.

    ``authoritative`` marks every row saved; used when the restaurants came
    from the saved-branches source itself.
    """
    saved_set = saved_set or set()
    rows: list[DisplayRow] = []
    for restaurant in restaurants:
        stamped = _stamp_restaurant(restaurant, saved_set, authoritative)
        for index, branch in enumerate(stamped.branches):
            rows.append(DisplayRow(restaurant=stamped, branch=branch, branch_index=index))
    return rows


def nearby_rows(
    nearby: Iterable[Restaurant],
    exclude_ids: set[str],
    saved_set: set[SavedKey] | None = None,
) -> list[DisplayRow]:
    """
    Suggestion rows for nearby restaurants not already listed.

    Each nearby restaurant contributes its first branch only; restaurants in
    ``exclude_ids`` or repeated within ``nearby`` are skipped.
    """
    saved_set = saved_set or set()
    seen = set(exclude_ids)
    rows: list[DisplayRow] = []
    for restaurant in nearby:
        if restaurant.id in seen:
            logger.debug("Skipping duplicate nearby restaurant %s", restaurant.id)
            continue
        if not restaurant.branches:
            continue
        seen.add(restaurant.id)
        stamped = _stamp_restaurant(restaurant, saved_set, authoritative=False)
        rows.append(
            DisplayRow(
                restaurant=stamped,
                branch=stamped.branches[0],
                branch_index=0,
                is_nearby_suggestion=True,
            )
        )
    return rows


def _rows_frame(rows: list[DisplayRow], favorite_cuisines: Iterable[str]) -> pd.DataFrame:
    favorites = set(favorite_cuisines)
    frame = pd.DataFrame(
        {
            "name": [r.restaurant.name for r in rows],
            "cuisine": [r.restaurant.cuisine for r in rows],
            "city": [r.branch.city for r in rows],
            "price_range": [r.restaurant.price_range for r in rows],
            "distance_km": pd.Series(
                [np.nan if r.branch.distance_km is None else r.branch.distance_km for r in rows],
                dtype="float64",
            ),
            "is_saved": pd.Series([r.branch.is_saved for r in rows], dtype="bool"),
            "is_favorite": pd.Series(
                [r.restaurant.cuisine in favorites for r in rows], dtype="bool"
            ),
            "position": np.arange(len(rows)),
        }
    )
    return frame


def filter_rows(rows: list[DisplayRow], criteria: FilterCriteria) -> list[DisplayRow]:
    if not rows:
        return []
    frame = _rows_frame(rows, ())
    kept = frame.index[filter_mask(frame, criteria).to_numpy()]
    return [rows[i] for i in kept]


def sort_rows(rows: list[DisplayRow], favorite_cuisines: Iterable[str] = ()) -> list[DisplayRow]:
    """
    Stable ordering: saved first, then nearest (unknown distance last),
    then favorite cuisine, then restaurant name (case-sensitive).
    """
    if not rows:
        return []
    frame = _rows_frame(rows, favorite_cuisines)
    ordered = frame.sort_values(
        by=_SORT_COLUMNS,
        ascending=_SORT_ASCENDING,
        na_position="last",
        kind="stable",
    )
    return [rows[i] for i in ordered["position"]]


def rank_rows(
    restaurants: Iterable[Restaurant],
    criteria: FilterCriteria | None = None,
    saved_set: set[SavedKey] | None = None,
    nearby: Iterable[Restaurant] | None = None,
    favorite_cuisines: Iterable[str] | None = None,
    saved_source: bool = False,
) -> list[DisplayRow]:
    """
    Flatten, stamp, filter, merge nearby suggestions and sort.

    Missing saved data or nearby lists degrade to empty inputs. Nearby
    suggestions bypass the search filters and are left out in saved-only mode.
    """
    criteria = criteria or FilterCriteria()
    favorite_cuisines = list(favorite_cuisines or [])

    rows = flatten_rows(restaurants, saved_set, authoritative=saved_source)
    primary = filter_rows(rows, criteria)
    logger.debug("Filtered %d of %d branch rows", len(primary), len(rows))

    nearby = list(nearby or [])
    if nearby and not criteria.saved_only:
        present = {row.restaurant.id for row in primary}
        suggestions = nearby_rows(nearby, present, saved_set)
        logger.debug("Merged %d nearby suggestions", len(suggestions))
        primary = primary + suggestions

    return sort_rows(primary, favorite_cuisines)
