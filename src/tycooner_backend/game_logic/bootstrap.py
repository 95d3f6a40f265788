"""Generation of the initial game state from the reference dataset."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tycooner_backend.game_logic.markets import build_market
from tycooner_backend.game_logic.production import derive_production_pricing
from tycooner_backend.game_logic.reference_data import GOODS, default_dataset
from tycooner_backend.game_logic.state import Country, GameState, market_key
from tycooner_backend.shared.value_objects import Position

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tycooner_backend.game_logic.configuration import EconomyConfiguration
    from tycooner_backend.game_logic.reference_data import GeoDataset, Good
    from tycooner_backend.game_logic.state import Market


def generate_countries(
    dataset: GeoDataset, goods: Mapping[str, Good]
) -> dict[str, Country]:
    """Combine geometry and economics into country records.

    Geo records without economic data are skipped, and neighbor lists are
    narrowed to the countries that remain so adjacency stays symmetric.
    """
    included = {
        record.id for record in dataset.countries if record.id in dataset.economics
    }
    countries: dict[str, Country] = {}
    for record in dataset.countries:
        if record.id not in included:
            continue
        economics = dataset.economics[record.id]
        lon, lat = record.centroid
        countries[record.id] = Country(
            id=record.id,
            name=record.name,
            position=Position(x=lon, y=-lat),
            neighbors=tuple(
                neighbor for neighbor in record.neighbors if neighbor in included
            ),
            population=economics.population,
            wage_level=economics.wage_level,
            price_index=economics.price_index,
            resource_bonus=dict(economics.resource_bonus),
            production_pricing=derive_production_pricing(economics, goods),
        )
    return countries


def generate_markets(
    countries: Mapping[str, Country], goods: Mapping[str, Good]
) -> dict[str, Market]:
    """Create one market for every (country, good) combination."""
    return {
        market_key(country.id, good.id): build_market(country, good)
        for country in countries.values()
        for good in goods.values()
    }


def create_initial_state(
    configuration: EconomyConfiguration,
    dataset: GeoDataset | None = None,
) -> GameState:
    """Return the state a new or restarted session begins with."""
    source = dataset or default_dataset()
    goods = dict(GOODS)
    countries = generate_countries(source, goods)
    return GameState(
        money=configuration.money(configuration.starting_money),
        current_day=0,
        countries=countries,
        goods=goods,
        markets=generate_markets(countries, goods),
        tick_interval_ms=configuration.tick_interval_ms,
    )


__all__ = ["create_initial_state", "generate_countries", "generate_markets"]
