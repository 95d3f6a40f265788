"""Phase contracts shared by the day engine and its handlers."""

from __future__ import annotations

from collections.abc import Callable, Mapping  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from tycooner_backend.game_logic.configuration import (
    EconomyConfiguration,  # noqa: TC001
)
from tycooner_backend.game_logic.state import GameState  # noqa: TC001
from tycooner_backend.shared.events import LoggedEvent, PhaseLog  # noqa: TC001
from tycooner_backend.shared.value_objects import PhaseIdentifier


class PhaseInputBase(BaseModel):
    """Inputs handed to a phase handler."""

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(..., ge=0)
    configuration: EconomyConfiguration
    state: GameState
    previous_results: tuple[PhaseResultBase, ...] = Field(default_factory=tuple)
    previous_events: tuple[LoggedEvent, ...] = Field(default_factory=tuple)


class PhaseResultBase(BaseModel):
    """Outcome of a single phase."""

    model_config = ConfigDict(frozen=True)

    phase: PhaseIdentifier
    day_index: int = Field(..., ge=0)
    updated_state: GameState
    log: PhaseLog
    summary: str = ""
    metrics: dict[str, float | int | Decimal] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_log(self) -> PhaseResultBase:
        """Ensure the log belongs to this phase and day."""
        if self.log.phase is not self.phase or self.log.day_index != self.day_index:
            msg = "PhaseLog metadata does not match the phase result."
            raise ValueError(msg)
        return self


PhaseInputBase.model_rebuild()


@runtime_checkable
class PhaseHandler(Protocol):
    """Callable object resolving one phase."""

    def handle(self, input_data: PhaseInputBase) -> PhaseResultBase:
        """Return the result of running the phase on *input_data*."""


class PhaseHandlers(BaseModel):
    """Bundle of handlers, one per daily phase."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    production: PhaseHandler
    logistics: PhaseHandler
    market: PhaseHandler

    def as_mapping(
        self,
    ) -> Mapping[PhaseIdentifier, Callable[[PhaseInputBase], PhaseResultBase]]:
        """Return the handlers keyed by the phase they resolve."""
        return {
            PhaseIdentifier.PRODUCTION: self.production.handle,
            PhaseIdentifier.LOGISTICS: self.logistics.handle,
            PhaseIdentifier.MARKET: self.market.handle,
        }


__all__ = [
    "PhaseHandler",
    "PhaseHandlers",
    "PhaseInputBase",
    "PhaseResultBase",
]
