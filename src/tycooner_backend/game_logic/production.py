"""Facility limits, pricing and daily output into warehouse storage."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel
from pydantic.config import ConfigDict

from tycooner_backend.game_logic.reference_data import FACILITY_SPECS
from tycooner_backend.game_logic.state import (
    CountryProduction,
    FacilityInstance,
    LegacyFactory,
    ProductionPricing,
    Warehouse,
)
from tycooner_backend.shared.enums import FacilityType

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from tycooner_backend.game_logic.reference_data import CountryEconomics, Good
    from tycooner_backend.game_logic.state import Country


def good_for(facility_type: FacilityType) -> str:
    """Return the good produced by *facility_type*."""
    return FACILITY_SPECS[facility_type].good_id


def facility_limit(population: int, facility_type: FacilityType) -> int:
    """Return how many *facility_type* instances a population supports (at least 1)."""
    divisor = FACILITY_SPECS[facility_type].population_divisor
    return max(1, population // divisor)


def new_facility(facility_type: FacilityType) -> FacilityInstance:
    """Return a fresh instance of *facility_type* with its standard output."""
    return FacilityInstance(
        type=facility_type,
        output_per_day=FACILITY_SPECS[facility_type].output_per_day,
    )


def derive_production_pricing(
    economics: CountryEconomics, goods: Mapping[str, Good]
) -> ProductionPricing:
    """Build the per-country facility pricing table.

    Sell prices follow the country's price index, build costs its wage level;
    both are rounded to whole currency units.
    """
    sell_prices: dict[FacilityType, Decimal] = {}
    build_costs: dict[FacilityType, Decimal] = {}
    price_index = Decimal(str(economics.price_index))
    wage_level = Decimal(str(economics.wage_level))
    for facility_type, spec in FACILITY_SPECS.items():
        good = goods[spec.good_id]
        sell_prices[facility_type] = (good.base_price * price_index).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
        build_costs[facility_type] = (spec.base_build_cost * wage_level).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
    return ProductionPricing(sell_prices=sell_prices, build_costs=build_costs)


def daily_output(production: CountryProduction, facility_type: FacilityType) -> int:
    """Return the combined nominal output of every *facility_type* instance."""
    return sum(
        instance.output_per_day
        for instance in production.buildings.get(facility_type, ())
    )


def produce(
    warehouse: Warehouse,
    production: CountryProduction | None,
    factories: Iterable[LegacyFactory] = (),
) -> tuple[Warehouse, dict[str, int]]:
    """Run one day of output for a country into *warehouse*.

    A full warehouse produces nothing. Otherwise legacy factories run first,
    then facility instances in type order, each adding at most the remaining
    free capacity. Returns the updated warehouse and units made per good.
    """
    produced: dict[str, int] = {}
    if warehouse.is_full():
        return warehouse, produced

    outputs: list[tuple[str, int]] = [
        (factory.good_id, factory.output_per_day) for factory in factories
    ]
    if production is not None:
        outputs.extend(
            (good_for(instance.type), instance.output_per_day)
            for instance in production.iter_instances()
        )

    for good_id, output in outputs:
        amount = min(output, warehouse.free_capacity())
        if amount <= 0:
            continue
        warehouse = warehouse.deposit(good_id, amount)
        produced[good_id] = produced.get(good_id, 0) + amount
    return warehouse, produced


class PriceLedgerEntry(BaseModel):
    """One row of the cross-country price comparison."""

    model_config = ConfigDict(frozen=True)

    country_id: str
    country_name: str
    sell_price: Decimal
    build_cost: Decimal
    unlocked: bool


def price_ledger(
    countries: Iterable[Country],
    facility_type: FacilityType,
    *,
    unlocked: Collection[str] = (),
    descending: bool = False,
) -> list[PriceLedgerEntry]:
    """Rank countries by the sell price of *facility_type*'s good.

    Countries without a pricing table are left out; ties are broken by name.
    """
    entries = [
        PriceLedgerEntry(
            country_id=country.id,
            country_name=country.name,
            sell_price=country.production_pricing.sell_price(facility_type),
            build_cost=country.production_pricing.build_cost(facility_type),
            unlocked=country.id in unlocked,
        )
        for country in countries
        if country.production_pricing is not None
    ]
    entries.sort(key=lambda entry: entry.country_name)
    entries.sort(key=lambda entry: entry.sell_price, reverse=descending)
    return entries


__all__ = [
    "PriceLedgerEntry",
    "daily_output",
    "derive_production_pricing",
    "facility_limit",
    "good_for",
    "new_facility",
    "price_ledger",
    "produce",
]
