"""Economic configuration objects for game sessions."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from functools import cache

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from tycooner_backend.shared.enums import SimulationPolicy, TickSpeed
from tycooner_backend.shared.value_objects import (
    DEFAULT_PHASE_SEQUENCE,
    Money,
    PhaseSequence,
)

TICK_SPEED_INTERVALS_MS: dict[TickSpeed, int] = {
    TickSpeed.SLOW: 4000,
    TickSpeed.NORMAL: 2000,
    TickSpeed.FAST: 1000,
    TickSpeed.VERY_FAST: 500,
}


class EconomyDefaults(BaseSettings):
    """Load default economic parameters from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TYCOONER_ECONOMY_",
        extra="ignore",
    )

    starting_money: Decimal = Field(default=Decimal(10_000), ge=0)
    policy: SimulationPolicy = SimulationPolicy.INSTANT_TRANSFER
    tick_interval_ms: int = Field(
        default=TICK_SPEED_INTERVALS_MS[TickSpeed.NORMAL], gt=0
    )
    challenge_duration_seconds: int = Field(default=300, gt=0)
    rng_seed: int | None = Field(default=None)

    def to_config(self) -> EconomyConfiguration:
        """Convert defaults into an immutable configuration object."""
        return EconomyConfiguration(
            starting_money=self.starting_money,
            policy=self.policy,
            tick_interval_ms=self.tick_interval_ms,
            challenge_duration_seconds=self.challenge_duration_seconds,
            rng_seed=self.rng_seed,
        )


class EconomyConfiguration(BaseModel):
    """Immutable representation of the economic parameters for a session.

    Monetary knobs are plain decimals; the transaction layer wraps them in
    :class:`Money` when comparing against the balance.
    """

    model_config = ConfigDict(frozen=True)

    starting_money: Decimal = Field(default=Decimal(10_000), ge=0)
    policy: SimulationPolicy = SimulationPolicy.INSTANT_TRANSFER
    tick_interval_ms: int = Field(default=2000, gt=0)
    challenge_duration_seconds: int = Field(default=300, gt=0)
    rng_seed: int | None = None

    warehouse_build_cost: Decimal = Field(default=Decimal(5000), ge=0)
    warehouse_base_capacity: int = Field(default=60, ge=1)
    warehouse_capacity_increase: int = Field(default=30, ge=0)
    warehouse_upgrade_base_cost: Decimal = Field(default=Decimal(3000), ge=0)

    road_build_cost: Decimal = Field(default=Decimal(2000), ge=0)

    unlock_base_cost: Decimal = Field(default=Decimal(5000), ge=0)
    unlock_cost_growth: Decimal = Field(default=Decimal("1.5"), gt=0)

    legacy_factory_build_cost: Decimal = Field(default=Decimal(10_000), ge=0)
    legacy_factory_base_output: int = Field(default=15, ge=0)
    legacy_factory_upgrade_base_cost: Decimal = Field(default=Decimal(5000), ge=0)
    legacy_factory_output_increase: int = Field(default=8, ge=0)

    truck_capacity: int = Field(default=100, ge=0)
    logistics_cost_per_unit_per_100: Decimal = Field(default=Decimal("0.1"), ge=0)
    production_cost_share: Decimal = Field(default=Decimal("0.5"), ge=0)

    phase_sequence: PhaseSequence = Field(
        default_factory=lambda: DEFAULT_PHASE_SEQUENCE
    )

    def money(self, amount: Decimal | int) -> Money:
        """Wrap *amount* as a :class:`Money` value in the session currency."""
        return Money(amount=Decimal(amount), currency="USD")

    def unlock_cost(self, unlocked_count: int) -> Money:
        """Return the price of the next unlock given *unlocked_count* owned countries."""
        if unlocked_count <= 0:
            return Money.zero()
        raw = self.unlock_base_cost * self.unlock_cost_growth**unlocked_count
        return self.money(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class SessionOverrides(BaseModel):
    """Optional session-specific overrides for economic settings."""

    model_config = ConfigDict(frozen=True)

    starting_money: Decimal | None = Field(default=None, ge=0)
    policy: SimulationPolicy | None = None
    tick_interval_ms: int | None = Field(default=None, gt=0)
    challenge_duration_seconds: int | None = Field(default=None, gt=0)
    rng_seed: int | None = None

    def apply(self, config: EconomyConfiguration) -> EconomyConfiguration:
        """Return a copy of *config* with overrides applied."""
        updates = self.model_dump(exclude_none=True)
        if not updates:
            return config
        return EconomyConfiguration.model_validate(
            {**config.model_dump(), **updates}
        )


@cache
def get_default_economy_configuration() -> EconomyConfiguration:
    """Return the cached default economic configuration."""
    return EconomyDefaults().to_config()


def build_session_configuration(
    overrides: SessionOverrides | None = None,
) -> EconomyConfiguration:
    """Construct a configuration for a session, applying optional overrides."""
    defaults = get_default_economy_configuration()
    if overrides is None:
        return defaults
    return overrides.apply(defaults)


__all__ = [
    "TICK_SPEED_INTERVALS_MS",
    "EconomyConfiguration",
    "EconomyDefaults",
    "SessionOverrides",
    "build_session_configuration",
    "get_default_economy_configuration",
]
