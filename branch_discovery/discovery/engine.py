from __future__ import annotations

import logging
from datetime import datetime

from ..geo.config import DEFAULT_GEO_CONFIG, GeoConfig
from ..geo.distance import coordinate_from_record, distances_km
from ..slots.config import DEFAULT_SLOT_CONFIG, SlotConfig
from ..slots.generator import slots_for_selection
from ..slots.normalizer import normalize_restaurant
from .models import (
    Coordinate,
    DiscoveryRequest,
    DiscoveryResponse,
    Restaurant,
    group_saved_branches,
    saved_set_from_records,
)
from .ranking import rank_rows

logger = logging.getLogger(__name__)


def annotate_distances(
    restaurant: Restaurant,
    origin: Coordinate | None,
    config: GeoConfig = DEFAULT_GEO_CONFIG,
    keep_provided: bool = False,
) -> Restaurant:
    """
    Attach ``distance_km`` to every branch that has coordinates.

    Without an origin no distance is computed. ``keep_provided`` keeps a
    distance that arrived with the upstream record (nearby suggestions).
    """
    located = [b.coordinates for b in restaurant.branches if b.coordinates is not None]
    computed = iter(distances_km(origin, located, config)) if origin is not None else iter(())

    branches = []
    for branch in restaurant.branches:
        distance = None
        if branch.coordinates is not None:
            calculated = next(computed, None)
            if keep_provided and branch.distance_km is not None:
                distance = branch.distance_km
            else:
                distance = calculated
        branches.append(branch.model_copy(update={"distance_km": distance}))
    return restaurant.model_copy(update={"branches": branches})


def discover(
    request: DiscoveryRequest,
    now: datetime,
    geo_config: GeoConfig = DEFAULT_GEO_CONFIG,
    slot_config: SlotConfig = DEFAULT_SLOT_CONFIG,
) -> DiscoveryResponse:
    """
    Run one discovery query end to end.

    ``now`` is the caller's clock reading; nothing in here reads the system
    time. In saved-only mode without a primary restaurant list, the saved
    branches themselves become the list.
    """
    # One generator call per query; branches without slot data get these times.
    slot_times = slots_for_selection(now, request.date, request.time, slot_config)

    raw_restaurants = request.restaurants
    saved_source = False
    if request.filters.saved_only and not raw_restaurants:
        raw_restaurants = group_saved_branches(request.saved_branches)
        saved_source = True

    saved_set = saved_set_from_records(request.saved_branches, raw_restaurants)
    origin = coordinate_from_record(request.user_coordinates, geo_config)
    if request.user_coordinates and origin is None:
        logger.info("Ignoring implausible user coordinates %r", request.user_coordinates)

    restaurants = [
        annotate_distances(normalize_restaurant(raw, slot_times, geo_config), origin, geo_config)
        for raw in raw_restaurants
    ]
    nearby = [
        annotate_distances(
            normalize_restaurant(raw, slot_times, geo_config),
            origin,
            geo_config,
            keep_provided=True,
        )
        for raw in request.nearby or []
    ]

    rows = rank_rows(
        restaurants,
        criteria=request.filters,
        saved_set=saved_set,
        nearby=nearby,
        favorite_cuisines=request.favorite_cuisines,
        saved_source=saved_source,
    )
    logger.debug("Discovery returned %d rows for %d restaurants", len(rows), len(restaurants))
    return DiscoveryResponse(rows=rows, slot_times=slot_times, total_rows=len(rows))
