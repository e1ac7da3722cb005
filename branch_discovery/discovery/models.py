from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ALL = "all"
DEFAULT_CUISINE = "Various Cuisine"

SavedKey = tuple[str, int]


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class TimeSlot(BaseModel):
    """A bookable time of day. Built only by the slot normalizer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    available_seats: int | None = Field(default=None, ge=0, alias="availableSeats")


class Branch(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    address: str = ""
    city: str = ""
    coordinates: Coordinate | None = None
    slots: list[TimeSlot] = Field(default_factory=list)
    distance_km: float | None = Field(default=None, alias="distanceKm")
    is_saved: bool = Field(default=False, alias="isSaved")


class Restaurant(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    cuisine: str = DEFAULT_CUISINE
    price_range: str = Field(default="", alias="priceRange")
    branches: list[Branch] = Field(default_factory=list)
    is_saved: bool = Field(default=False, alias="isSaved")


class DisplayRow(BaseModel):
    """One rendered card: a single (restaurant, branch) pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    restaurant: Restaurant
    branch: Branch
    branch_index: int = Field(..., ge=0, alias="branchIndex")
    is_nearby_suggestion: bool = Field(default=False, alias="isNearbySuggestion")


class FilterCriteria(BaseModel):
    """
    Search and filter settings chosen in the UI.

    ``None`` and the exact string ``"all"`` mean "no filter" for city,
    cuisine, price range and distance. ``text`` is always a search string.
    ``max_distance_km`` also accepts the UI label form ``"5 km"``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str | None = None
    city: str | None = None
    cuisine: str | None = None
    price_range: str | None = Field(default=None, alias="priceRange")
    max_distance_km: float | str | None = Field(default=None, alias="maxDistanceKm")
    saved_only: bool = Field(default=False, alias="savedOnly")


def _field(record: dict[str, Any], *names: str, default: Any = None) -> Any:
    """Return the first present, non-None value among camelCase/snake_case names."""
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return default


def saved_set_from_records(
    records: list[dict[str, Any]] | None,
    restaurants: list[dict[str, Any]] | None = None,
) -> set[SavedKey]:
    """
    Build the ``(restaurant_id, branch_index)`` saved set.

    Records may carry ``branchIndex`` directly; otherwise the branch ``id`` is
    resolved to its position within the matching restaurant. Records that
    cannot be resolved are ignored.
    """
    if not records:
        return set()

    branch_positions: dict[tuple[str, str], int] = {}
    for restaurant in restaurants or []:
        rid = str(_field(restaurant, "id", default=""))
        for index, branch in enumerate(restaurant.get("branches") or []):
            if isinstance(branch, dict) and branch.get("id") is not None:
                branch_positions[(rid, str(branch["id"]))] = index

    saved: set[SavedKey] = set()
    for record in records:
        rid = _field(record, "restaurantId", "restaurant_id")
        if rid is None:
            continue
        index = _field(record, "branchIndex", "branch_index")
        if index is None:
            bid = _field(record, "branchId", "branch_id", "id")
            index = branch_positions.get((str(rid), str(bid)))
        try:
            saved.add((str(rid), int(index)))
        except (TypeError, ValueError):
            continue
    return saved


def group_saved_branches(records: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Group saved-branch records into raw restaurant records by restaurant id."""
    grouped: dict[str, dict[str, Any]] = {}
    for record in records or []:
        rid = _field(record, "restaurantId", "restaurant_id")
        if rid is None:
            continue
        key = str(rid)
        if key not in grouped:
            grouped[key] = {
                "id": key,
                "name": _field(record, "restaurantName", "restaurant_name", default=""),
                "cuisine": _field(record, "cuisine"),
                "priceRange": _field(record, "priceRange", "price_range", default=""),
                "branches": [],
            }
        grouped[key]["branches"].append(record)
    return list(grouped.values())


class DiscoveryRequest(BaseModel):
    """
    Everything one discovery query needs, as fetched by the caller.

    ``restaurants``, ``saved_branches`` and ``nearby`` are raw upstream
    records in any of the supported shapes. ``party_size`` is only forwarded
    to the availability lookup upstream; ranking does not use it.
    """

    model_config = ConfigDict(populate_by_name=True)

    restaurants: list[dict[str, Any]] = Field(default_factory=list)
    saved_branches: list[dict[str, Any]] | None = Field(default=None, alias="savedBranches")
    nearby: list[dict[str, Any]] | None = None
    user_coordinates: dict[str, Any] | None = Field(default=None, alias="userCoordinates")
    favorite_cuisines: list[str] = Field(default_factory=list, alias="favoriteCuisines")
    filters: FilterCriteria = Field(default_factory=FilterCriteria)
    date: str | None = None
    time: str | None = None
    party_size: int | None = Field(default=None, ge=1, alias="partySize")


class DiscoveryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rows: list[DisplayRow]
    slot_times: list[str] = Field(default_factory=list, alias="slotTimes")
    total_rows: int = Field(default=0, alias="totalRows")
