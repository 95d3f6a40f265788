"""Test configuration and fixtures for the backend test suite."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from tycooner_backend.game_logic.bootstrap import create_initial_state
from tycooner_backend.game_logic.configuration import (
    EconomyConfiguration,
    get_default_economy_configuration,
)
from tycooner_backend.game_logic.reference_data import (
    CountryEconomics,
    CountryGeoRecord,
    GeoDataset,
)
from tycooner_backend.settings import get_settings
from tycooner_backend.shared.enums import SimulationPolicy

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tycooner_backend.game_logic.state import GameState

START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure settings are loaded with predictable values during tests."""
    monkeypatch.setenv("RUN_DRIVERS", "false")
    get_settings.cache_clear()
    get_default_economy_configuration.cache_clear()
    yield
    get_settings.cache_clear()
    get_default_economy_configuration.cache_clear()


@pytest.fixture
def dataset() -> GeoDataset:
    """Three countries in a row: Alpha - Beta - Gamma."""
    return GeoDataset(
        countries=(
            CountryGeoRecord(id="AA", name="Alpha", neighbors=("BB",), centroid=(0, 0)),
            CountryGeoRecord(
                id="BB", name="Beta", neighbors=("AA", "CC"), centroid=(3, 4)
            ),
            CountryGeoRecord(id="CC", name="Gamma", neighbors=("BB",), centroid=(6, 8)),
        ),
        economics={
            "AA": CountryEconomics(
                population=24_000_000, wage_level=1.0, price_index=1.0
            ),
            "BB": CountryEconomics(
                population=12_000_000, wage_level=0.5, price_index=1.5
            ),
            "CC": CountryEconomics(
                population=1_000_000, wage_level=2.0, price_index=0.8
            ),
        },
    )


@pytest.fixture
def configuration() -> EconomyConfiguration:
    return EconomyConfiguration(rng_seed=7)


@pytest.fixture
def continuous_configuration() -> EconomyConfiguration:
    return EconomyConfiguration(rng_seed=7, policy=SimulationPolicy.CONTINUOUS_FLOW)


@pytest.fixture
def state(configuration: EconomyConfiguration, dataset: GeoDataset) -> GameState:
    return create_initial_state(configuration, dataset)
