"""Roads, truck lines and movement of goods between warehouses."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from tycooner_backend.game_logic.state import Road, TruckLine, road_key

if TYPE_CHECKING:
    from tycooner_backend.game_logic.state import Country, Warehouse

_DISTANCE_UNIT = Decimal(100)


def build_road(origin: Country, destination: Country) -> Road:
    """Return a level-1 road between two countries measured over their centroids."""
    return Road(
        id=road_key(origin.id, destination.id),
        from_country_id=origin.id,
        to_country_id=destination.id,
        distance=origin.position.distance_to(destination.position),
        level=1,
    )


def build_truck_line(
    line_id: str, road: Road, good_id: str, trucks: int, capacity_per_truck: int
) -> TruckLine:
    """Return a truck line moving *good_id* in the road's built direction."""
    return TruckLine(
        id=line_id,
        road_id=road.id,
        from_country_id=road.from_country_id,
        to_country_id=road.to_country_id,
        good_id=good_id,
        trucks_assigned=trucks,
        capacity_per_truck=capacity_per_truck,
    )


def transferable_amount(
    requested: int, source: Warehouse, destination: Warehouse, good_id: str
) -> int:
    """Return how much of *requested* can move without breaking either warehouse."""
    return max(
        0,
        min(requested, source.quantity(good_id), destination.free_capacity()),
    )


def move_goods(
    source: Warehouse, destination: Warehouse, good_id: str, amount: int
) -> tuple[Warehouse, Warehouse]:
    """Return both warehouses after moving *amount* units of *good_id*."""
    return source.withdraw(good_id, amount), destination.deposit(good_id, amount)


def transport_cost(
    moved: int, distance: float, cost_per_unit_per_100: Decimal
) -> Decimal:
    """Return the cost of hauling *moved* units over *distance*."""
    return Decimal(moved) * (Decimal(str(distance)) / _DISTANCE_UNIT) * (
        cost_per_unit_per_100
    )


__all__ = [
    "build_road",
    "build_truck_line",
    "move_goods",
    "transferable_amount",
    "transport_cost",
]
