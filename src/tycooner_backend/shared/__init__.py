"""Shared utilities, shared models and cross-cutting helpers for the backend."""

from tycooner_backend.shared.enums import (
    ChallengeStatus,
    FacilityType,
    GoodCategory,
    SimulationPolicy,
    TickSpeed,
)
from tycooner_backend.shared.events import DayLog, LoggedEvent, PhaseLog
from tycooner_backend.shared.rng import DeterministicRandomService
from tycooner_backend.shared.value_objects import (
    DEFAULT_PHASE_SEQUENCE,
    Money,
    PhaseIdentifier,
    PhaseSequence,
    Position,
)

__all__ = [
    "DEFAULT_PHASE_SEQUENCE",
    "ChallengeStatus",
    "DayLog",
    "DeterministicRandomService",
    "FacilityType",
    "GoodCategory",
    "LoggedEvent",
    "Money",
    "PhaseIdentifier",
    "PhaseLog",
    "PhaseSequence",
    "Position",
    "SimulationPolicy",
    "TickSpeed",
]
