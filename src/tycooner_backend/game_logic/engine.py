"""Day orchestration engine coordinating the execution of simulation phases."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from tycooner_backend.game_logic.configuration import (
    EconomyConfiguration,  # noqa: TC001
)
from tycooner_backend.game_logic.handlers import (
    LogisticsPhaseHandlerImpl,
    MarketPhaseHandlerImpl,
    ProductionPhaseHandlerImpl,
)
from tycooner_backend.game_logic.phases import (
    PhaseHandlers,
    PhaseInputBase,
    PhaseResultBase,
)
from tycooner_backend.game_logic.state import GameState  # noqa: TC001
from tycooner_backend.shared.events import DayLog, LoggedEvent
from tycooner_backend.shared.value_objects import PhaseSequence  # noqa: TC001


class DayResult(BaseModel):
    """Aggregate outcome returned after executing all phases for a day."""

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(..., ge=0)
    final_state: GameState
    phase_results: tuple[PhaseResultBase, ...]
    log: DayLog

    @model_validator(mode="after")
    def _validate_log_alignment(self) -> DayResult:
        """Ensure the day log aligns with the result metadata."""
        if self.log.day_index != self.day_index:
            msg = "DayLog day index must match DayResult day index."
            raise ValueError(msg)
        if self.final_state.current_day != self.day_index:
            msg = "Final state must be stamped with the simulated day."
            raise ValueError(msg)
        return self


def default_handlers() -> PhaseHandlers:
    """Return the standard production, logistics and market handlers."""
    return PhaseHandlers(
        production=ProductionPhaseHandlerImpl(),
        logistics=LogisticsPhaseHandlerImpl(),
        market=MarketPhaseHandlerImpl(),
    )


class DayEngine:
    """Coordinate execution of all day phases in the configured order."""

    def __init__(self, handlers: PhaseHandlers | None = None) -> None:
        self._handlers = handlers or default_handlers()

    def run_day(
        self, state: GameState, configuration: EconomyConfiguration
    ) -> DayResult:
        """Advance *state* by one day and return the new snapshot with its log."""
        handler_map = self._handlers.as_mapping()
        phase_sequence: PhaseSequence = configuration.phase_sequence
        missing = [phase for phase in phase_sequence.phases if phase not in handler_map]
        if missing:
            phase_labels = ", ".join(phase.value for phase in missing)
            msg = f"No handlers registered for phases: {phase_labels}"
            raise ValueError(msg)

        day_index = state.current_day + 1
        current_state = state.model_copy(update={"current_day": day_index})
        day_log = DayLog(day_index=day_index)
        events_accumulator: list[LoggedEvent] = []
        phase_results: list[PhaseResultBase] = []

        for phase in phase_sequence.phases:
            phase_input = PhaseInputBase(
                day_index=day_index,
                configuration=configuration,
                state=current_state,
                previous_results=tuple(phase_results),
                previous_events=tuple(events_accumulator),
            )
            result = handler_map[phase](phase_input)
            if result.phase is not phase:
                msg = "Phase handler returned a result tagged with a different phase."
                raise ValueError(msg)
            phase_results.append(result)
            events_accumulator.extend(result.log.events)
            day_log = day_log.append(result.log)
            current_state = result.updated_state

        return DayResult(
            day_index=day_index,
            final_state=current_state,
            phase_results=tuple(phase_results),
            log=day_log,
        )


__all__ = ["DayEngine", "DayResult", "default_handlers"]
