"""Supply and demand pricing for per-country markets."""

from __future__ import annotations

from decimal import Decimal
from math import floor
from typing import TYPE_CHECKING

from tycooner_backend.game_logic.reference_data import CATEGORY_DEMAND_MULTIPLIERS
from tycooner_backend.game_logic.state import Country, Market

if TYPE_CHECKING:
    from tycooner_backend.game_logic.reference_data import Good

SHORTAGE_PREMIUM = Decimal("0.5")
OVERSUPPLY_DISCOUNT = Decimal("0.3")
PRICE_FLOOR_MULTIPLIER = Decimal("0.5")

_LABOR_COST_SHARE = Decimal("0.3")
_RESOURCE_COST_SHARE = Decimal("0.4")
_DEMAND_POPULATION_UNIT = 100_000


def _as_decimal(value: float) -> Decimal:
    return Decimal(str(value))


def production_cost(country: Country, good: Good) -> Decimal:
    """Return the unit cost of making *good* in *country*.

    Labor weighs the country's wage level, resources weigh its bonus for the
    good (lower bonus, cheaper input).
    """
    labor = (
        _as_decimal(good.labor_intensity)
        * _as_decimal(country.wage_level)
        * good.base_price
        * _LABOR_COST_SHARE
    )
    bonus = country.resource_bonus.get(good.id, 1.0)
    resource = (
        _as_decimal(good.resource_intensity)
        * _as_decimal(bonus)
        * good.base_price
        * _RESOURCE_COST_SHARE
    )
    return labor + resource


def base_sell_price(country: Country, good: Good) -> Decimal:
    """Return the balanced-market price of *good* in *country*."""
    return good.base_price * _as_decimal(country.price_index)


def max_daily_demand(country: Country, good: Good) -> int:
    """Return how many units of *good* *country* absorbs per day."""
    multiplier = CATEGORY_DEMAND_MULTIPLIERS.get(good.category, 1.0)
    return floor(country.population / _DEMAND_POPULATION_UNIT * multiplier)


def build_market(country: Country, good: Good) -> Market:
    """Create the initial market record for a (country, good) pair."""
    price = base_sell_price(country, good)
    return Market(
        country_id=country.id,
        good_id=good.id,
        production_cost=production_cost(country, good),
        base_sell_price=price,
        max_daily_demand=max_daily_demand(country, good),
        current_supply=0,
        current_price=price,
    )


def price_multiplier(supply: int, demand: int) -> Decimal:
    """Return the price factor for a supply/demand ratio.

    Shortage raises the price up to 1.5x, oversupply lowers it down to 0.5x.
    """
    ratio = Decimal(supply) / Decimal(demand) if demand > 0 else Decimal(1)
    if ratio < 1:
        return 1 + (1 - ratio) * SHORTAGE_PREMIUM
    if ratio > 1:
        return max(PRICE_FLOOR_MULTIPLIER, 1 - (ratio - 1) * OVERSUPPLY_DISCOUNT)
    return Decimal(1)


def reprice(market: Market, supply: int) -> Market:
    """Return *market* with supply set to *supply* and the price recomputed."""
    clamped = max(0, supply)
    multiplier = price_multiplier(clamped, market.max_daily_demand)
    return market.model_copy(
        update={
            "current_supply": clamped,
            "current_price": market.base_sell_price * multiplier,
        }
    )


__all__ = [
    "OVERSUPPLY_DISCOUNT",
    "PRICE_FLOOR_MULTIPLIER",
    "SHORTAGE_PREMIUM",
    "base_sell_price",
    "build_market",
    "max_daily_demand",
    "price_multiplier",
    "production_cost",
    "reprice",
]
