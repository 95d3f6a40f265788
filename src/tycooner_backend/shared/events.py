"""Event logging primitives shared across the backend."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from tycooner_backend.shared.value_objects import PhaseIdentifier  # noqa: TC001


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class LoggedEvent(BaseModel):
    """Represents a single immutable log entry produced by the economy.

    Events raised by simulation phases carry their phase; events raised by
    player transactions or the challenge clock leave it empty.
    """

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(..., ge=0)
    phase: PhaseIdentifier | None = None
    event_type: str = Field(..., min_length=1)
    message: str | None = None
    country_id: str | None = Field(default=None, min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=_utcnow)


class PhaseLog(BaseModel):
    """Container bundling all notable events for a phase."""

    model_config = ConfigDict(frozen=True)

    phase: PhaseIdentifier
    day_index: int = Field(..., ge=0)
    events: tuple[LoggedEvent, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _ensure_alignment(self) -> PhaseLog:
        """Ensure event metadata aligns with the log metadata."""
        for event in self.events:
            if event.phase is not self.phase or event.day_index != self.day_index:
                msg = "Event metadata does not match the owning PhaseLog."
                raise ValueError(msg)
        return self


class DayLog(BaseModel):
    """Aggregated log output produced by the day engine."""

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(..., ge=0)
    phases: tuple[PhaseLog, ...] = Field(default_factory=tuple)

    def append(self, log: PhaseLog) -> DayLog:
        """Return a new :class:`DayLog` with *log* appended."""
        if log.day_index != self.day_index:
            msg = "PhaseLog day index must match DayLog."
            raise ValueError(msg)
        return DayLog(day_index=self.day_index, phases=(*self.phases, log))

    def events(self) -> tuple[LoggedEvent, ...]:
        """Return every event of the day in phase order."""
        return tuple(event for phase_log in self.phases for event in phase_log.events)


__all__ = [
    "DayLog",
    "LoggedEvent",
    "PhaseLog",
]
