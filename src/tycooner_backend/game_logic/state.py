"""Immutable state containers used by the game logic layer."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, PositiveInt, model_validator
from pydantic.config import ConfigDict

from tycooner_backend.game_logic.reference_data import (
    FACILITY_SPECS,
    Good,
)
from tycooner_backend.shared.enums import FacilityType
from tycooner_backend.shared.value_objects import Money, Position

if TYPE_CHECKING:
    from collections.abc import Iterator


def market_key(country_id: str, good_id: str) -> str:
    """Return the lookup key of the market for *good_id* in *country_id*."""
    return f"{country_id}-{good_id}"


def road_key(from_country_id: str, to_country_id: str) -> str:
    """Return the identifier of a road built from one country to another."""
    return f"road-{from_country_id}-{to_country_id}"


class ProductionPricing(BaseModel):
    """Per-country sell prices and build costs for each facility type."""

    model_config = ConfigDict(frozen=True)

    sell_prices: dict[FacilityType, Decimal]
    build_costs: dict[FacilityType, Decimal]

    @model_validator(mode="after")
    def _validate_complete(self) -> ProductionPricing:
        """Ensure every facility type is priced."""
        for facility_type in FacilityType:
            if (
                facility_type not in self.sell_prices
                or facility_type not in self.build_costs
            ):
                msg = f"Pricing table is missing facility type {facility_type}."
                raise ValueError(msg)
        return self

    def sell_price(self, facility_type: FacilityType) -> Decimal:
        """Return the local sell price of the good *facility_type* produces."""
        return self.sell_prices[facility_type]

    def build_cost(self, facility_type: FacilityType) -> Decimal:
        """Return the local cost of building one *facility_type* instance."""
        return self.build_costs[facility_type]


class Country(BaseModel):
    """Static description of a map territory and its economy."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    position: Position
    neighbors: tuple[str, ...] = Field(default_factory=tuple)
    population: PositiveInt
    wage_level: float = Field(..., gt=0)
    price_index: float = Field(default=1.0, gt=0)
    resource_bonus: dict[str, float] = Field(default_factory=dict)
    production_pricing: ProductionPricing | None = None

    def is_neighbor(self, country_id: str) -> bool:
        """Return whether *country_id* shares a border with this country."""
        return country_id in self.neighbors


class Market(BaseModel):
    """Pricing and demand record for one good in one country."""

    model_config = ConfigDict(frozen=True)

    country_id: str
    good_id: str
    production_cost: Decimal = Field(..., ge=0)
    base_sell_price: Decimal = Field(..., ge=0)
    max_daily_demand: int = Field(..., ge=0)
    current_supply: int = Field(default=0, ge=0)
    current_price: Decimal = Field(..., ge=0)

    @property
    def key(self) -> str:
        """Return the lookup key of this market."""
        return market_key(self.country_id, self.good_id)


class Warehouse(BaseModel):
    """Bounded storage for every good held in a country.

    The sum of all stored quantities never exceeds ``capacity``; every
    mutator checks this before returning a new instance.
    """

    model_config = ConfigDict(frozen=True)

    country_id: str
    level: PositiveInt = 1
    capacity: int = Field(..., ge=0)
    storage: dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_storage(self) -> Warehouse:
        """Ensure quantities are non-negative and fit the capacity."""
        for good_id, amount in self.storage.items():
            if amount < 0:
                msg = f"Stored quantity of {good_id} must be non-negative."
                raise ValueError(msg)
        if self.total_stored() > self.capacity:
            msg = (
                f"Warehouse {self.country_id} stores {self.total_stored()} units "
                f"above its capacity of {self.capacity}."
            )
            raise ValueError(msg)
        return self

    def total_stored(self) -> int:
        """Return the number of units stored across all goods."""
        return sum(self.storage.values())

    def free_capacity(self) -> int:
        """Return how many more units fit into the warehouse."""
        return max(0, self.capacity - self.total_stored())

    def is_full(self) -> bool:
        """Return whether no further unit fits."""
        return self.total_stored() >= self.capacity

    def quantity(self, good_id: str) -> int:
        """Return the stored quantity of *good_id* (zero when absent)."""
        return self.storage.get(good_id, 0)

    def deposit(self, good_id: str, amount: int) -> Warehouse:
        """Return a warehouse with *amount* units of *good_id* added."""
        if amount < 0:
            msg = "Deposit amount must be non-negative."
            raise ValueError(msg)
        if amount > self.free_capacity():
            msg = (
                f"Cannot store {amount} units in {self.country_id}; "
                f"only {self.free_capacity()} free."
            )
            raise ValueError(msg)
        storage = dict(self.storage)
        storage[good_id] = storage.get(good_id, 0) + amount
        return self.model_copy(update={"storage": storage})

    def withdraw(self, good_id: str, amount: int) -> Warehouse:
        """Return a warehouse with *amount* units of *good_id* removed."""
        if amount < 0:
            msg = "Withdraw amount must be non-negative."
            raise ValueError(msg)
        available = self.quantity(good_id)
        if amount > available:
            msg = (
                f"Cannot withdraw {amount} units of {good_id} from "
                f"{self.country_id}; only {available} stored."
            )
            raise ValueError(msg)
        storage = dict(self.storage)
        storage[good_id] = available - amount
        return self.model_copy(update={"storage": storage})

    def upgraded(self, capacity_increase: int) -> Warehouse:
        """Return the warehouse one level higher with extra capacity."""
        return self.model_copy(
            update={
                "level": self.level + 1,
                "capacity": self.capacity + capacity_increase,
            }
        )


class FacilityInstance(BaseModel):
    """A single production building with a fixed daily output."""

    model_config = ConfigDict(frozen=True)

    type: FacilityType
    output_per_day: int = Field(..., ge=0)


def _empty_buildings() -> dict[FacilityType, tuple[FacilityInstance, ...]]:
    return {facility_type: () for facility_type in FACILITY_SPECS}


class CountryProduction(BaseModel):
    """All production facilities of one country grouped by type."""

    model_config = ConfigDict(frozen=True)

    country_id: str
    buildings: dict[FacilityType, tuple[FacilityInstance, ...]] = Field(
        default_factory=_empty_buildings
    )

    @model_validator(mode="after")
    def _validate_buckets(self) -> CountryProduction:
        """Ensure every instance sits in the bucket of its own type."""
        for facility_type, instances in self.buildings.items():
            for instance in instances:
                if instance.type is not facility_type:
                    msg = (
                        f"{instance.type} facility is misclassified in the "
                        f"{facility_type} bucket."
                    )
                    raise ValueError(msg)
        return self

    def count(self, facility_type: FacilityType) -> int:
        """Return how many facilities of *facility_type* exist."""
        return len(self.buildings.get(facility_type, ()))

    def total(self) -> int:
        """Return the number of facilities across all types."""
        return sum(len(instances) for instances in self.buildings.values())

    def iter_instances(self) -> Iterator[FacilityInstance]:
        """Yield instances in production order (farm, factory, ranch)."""
        for facility_type in FACILITY_SPECS:
            yield from self.buildings.get(facility_type, ())

    def add(self, instance: FacilityInstance) -> CountryProduction:
        """Return production with *instance* appended to its type bucket."""
        buildings = dict(self.buildings)
        buildings[instance.type] = (*buildings.get(instance.type, ()), instance)
        return self.model_copy(update={"buildings": buildings})

    def remove_newest(self, facility_type: FacilityType) -> CountryProduction:
        """Return production without the most recently added *facility_type*."""
        current = self.buildings.get(facility_type, ())
        if not current:
            msg = f"No {facility_type} facility to remove in {self.country_id}."
            raise ValueError(msg)
        buildings = dict(self.buildings)
        buildings[facility_type] = current[:-1]
        return self.model_copy(update={"buildings": buildings})


class LegacyFactory(BaseModel):
    """Single-good factory with upgradeable output."""

    model_config = ConfigDict(frozen=True)

    id: str
    country_id: str
    good_id: str
    level: PositiveInt = 1
    output_per_day: int = Field(..., ge=0)

    def upgraded(self, output_increase: int) -> LegacyFactory:
        """Return the factory one level higher with extra daily output."""
        return self.model_copy(
            update={
                "level": self.level + 1,
                "output_per_day": self.output_per_day + output_increase,
            }
        )


class Road(BaseModel):
    """Connection between two neighboring countries."""

    model_config = ConfigDict(frozen=True)

    id: str
    from_country_id: str
    to_country_id: str
    distance: float = Field(..., ge=0)
    level: PositiveInt = 1

    def connects(self, first_id: str, second_id: str) -> bool:
        """Return whether the road joins the two countries in either direction."""
        return {self.from_country_id, self.to_country_id} == {first_id, second_id}


class TruckLine(BaseModel):
    """Daily transport assignment of one good along a road."""

    model_config = ConfigDict(frozen=True)

    id: str
    road_id: str
    from_country_id: str
    to_country_id: str
    good_id: str
    trucks_assigned: int = Field(..., ge=0)
    capacity_per_truck: int = Field(..., ge=0)

    @property
    def daily_capacity(self) -> int:
        """Return how many units the line can move per day."""
        return self.trucks_assigned * self.capacity_per_truck


class ChallengeState(BaseModel):
    """Timed objective to unlock a specific next country."""

    model_config = ConfigDict(frozen=True)

    target_country_id: str | None = None
    deadline: datetime | None = None
    game_over: bool = False


class GameState(BaseModel):
    """Aggregate snapshot of the whole economy.

    Every subsystem receives the current snapshot and returns a new one; the
    helpers below never mutate in place.
    """

    model_config = ConfigDict(frozen=True)

    money: Money
    current_day: int = Field(default=0, ge=0)
    unlocked_countries: tuple[str, ...] = Field(default_factory=tuple)
    challenge: ChallengeState = Field(default_factory=ChallengeState)
    countries: dict[str, Country]
    goods: dict[str, Good]
    markets: dict[str, Market] = Field(default_factory=dict)
    warehouses: dict[str, Warehouse] = Field(default_factory=dict)
    production: dict[str, CountryProduction] = Field(default_factory=dict)
    factories: dict[str, LegacyFactory] = Field(default_factory=dict)
    roads: dict[str, Road] = Field(default_factory=dict)
    truck_lines: dict[str, TruckLine] = Field(default_factory=dict)
    is_paused: bool = False
    tick_interval_ms: int = Field(default=2000, gt=0)
    facility_warning: bool = False

    def is_unlocked(self, country_id: str) -> bool:
        """Return whether *country_id* belongs to the player."""
        return country_id in self.unlocked_countries

    def locked_countries(self) -> tuple[str, ...]:
        """Return ids of countries not yet unlocked, in dataset order."""
        unlocked = set(self.unlocked_countries)
        return tuple(
            country_id for country_id in self.countries if country_id not in unlocked
        )

    def production_for(self, country_id: str) -> CountryProduction:
        """Return the production record of *country_id* (empty when absent)."""
        return self.production.get(country_id) or CountryProduction(
            country_id=country_id
        )

    def total_facilities(self) -> int:
        """Return the number of production facilities owned anywhere."""
        instances = sum(record.total() for record in self.production.values())
        return instances + len(self.factories)

    def find_road(self, first_id: str, second_id: str) -> Road | None:
        """Return the road joining two countries in either direction."""
        for road in self.roads.values():
            if road.connects(first_id, second_id):
                return road
        return None

    def credit_money(self, amount: Money) -> GameState:
        """Increase money by *amount* and return a new state instance."""
        return self.model_copy(update={"money": self.money.add(amount)})

    def debit_money(self, amount: Money) -> GameState:
        """Decrease money by *amount* and return a new state instance."""
        return self.model_copy(update={"money": self.money.subtract(amount)})

    def with_warehouse(self, warehouse: Warehouse) -> GameState:
        """Return a state with *warehouse* stored under its country."""
        warehouses = {**self.warehouses, warehouse.country_id: warehouse}
        return self.model_copy(update={"warehouses": warehouses})

    def with_warehouses(self, warehouses: dict[str, Warehouse]) -> GameState:
        """Return a state with all warehouses replaced by *warehouses*."""
        return self.model_copy(update={"warehouses": warehouses})

    def with_production(self, production: CountryProduction) -> GameState:
        """Return a state with *production* stored under its country."""
        records = {**self.production, production.country_id: production}
        return self.model_copy(update={"production": records})

    def with_factory(self, factory: LegacyFactory) -> GameState:
        """Return a state with *factory* stored under its id."""
        factories = {**self.factories, factory.id: factory}
        return self.model_copy(update={"factories": factories})

    def with_road(self, road: Road) -> GameState:
        """Return a state with *road* stored under its id."""
        return self.model_copy(update={"roads": {**self.roads, road.id: road}})

    def with_truck_line(self, line: TruckLine) -> GameState:
        """Return a state with *line* stored under its id."""
        lines = {**self.truck_lines, line.id: line}
        return self.model_copy(update={"truck_lines": lines})

    def with_markets(self, markets: dict[str, Market]) -> GameState:
        """Return a state with all markets replaced by *markets*."""
        return self.model_copy(update={"markets": markets})

    def with_unlocked(self, country_id: str) -> GameState:
        """Return a state with *country_id* appended to the unlocked list."""
        return self.model_copy(
            update={"unlocked_countries": (*self.unlocked_countries, country_id)}
        )

    def with_challenge(self, challenge: ChallengeState) -> GameState:
        """Return a state with the challenge replaced by *challenge*."""
        return self.model_copy(update={"challenge": challenge})


__all__ = [
    "ChallengeState",
    "Country",
    "CountryProduction",
    "FacilityInstance",
    "GameState",
    "LegacyFactory",
    "Market",
    "ProductionPricing",
    "Road",
    "TruckLine",
    "Warehouse",
    "market_key",
    "road_key",
]
