from __future__ import annotations

from decimal import Decimal

import pytest

from tycooner_backend.game_logic.configuration import (
    EconomyConfiguration,
    EconomyDefaults,
    SessionOverrides,
    build_session_configuration,
)
from tycooner_backend.shared.enums import SimulationPolicy
from tycooner_backend.shared.value_objects import (
    Money,
    PhaseIdentifier,
    PhaseSequence,
)


def test_unlock_cost_grows_geometrically() -> None:
    config = EconomyConfiguration()

    costs = [config.unlock_cost(count).amount for count in range(5)]

    assert costs == [
        Decimal(0),
        Decimal(7500),
        Decimal(11250),
        Decimal(16875),
        Decimal(25313),
    ]


def test_defaults_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TYCOONER_ECONOMY_POLICY", "continuous_flow")
    monkeypatch.setenv("TYCOONER_ECONOMY_STARTING_MONEY", "25000")

    config = EconomyDefaults().to_config()

    assert config.policy is SimulationPolicy.CONTINUOUS_FLOW
    assert config.money(config.starting_money) == Money.of(25000)


def test_session_overrides_replace_only_given_fields() -> None:
    overrides = SessionOverrides(rng_seed=3, challenge_duration_seconds=60)

    config = build_session_configuration(overrides)

    assert config.rng_seed == 3
    assert config.challenge_duration_seconds == 60
    assert config.warehouse_base_capacity == 60
    assert build_session_configuration() == EconomyConfiguration()


def test_phase_sequence_rejects_duplicates() -> None:
    with pytest.raises(ValueError, match="duplicates"):
        PhaseSequence(
            phases=(PhaseIdentifier.PRODUCTION, PhaseIdentifier.PRODUCTION)
        )


def test_money_rounds_half_up_to_cents() -> None:
    assert Money.of("10.005").amount == Decimal("10.01")
    assert Money.of(5).add(Money.of("0.25")).amount == Decimal("5.25")
    assert Money.of(5).covers(Money.of(5))
    assert not Money.of(5).covers(Money.of("5.01"))
