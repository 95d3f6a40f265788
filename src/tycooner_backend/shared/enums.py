"""Shared enumerations used across the backend."""

from enum import StrEnum


class GoodCategory(StrEnum):
    """Demand categories a tradeable good belongs to."""

    FOOD = "food"
    RAW = "raw"
    MANUFACTURED = "manufactured"
    CONSUMER = "consumer"
    LUXURY = "luxury"


class FacilityType(StrEnum):
    """Closed set of production building kinds a country can host."""

    FARM = "farm"
    FACTORY = "factory"
    RANCH = "ranch"


class SimulationPolicy(StrEnum):
    """Economic rule set a session runs under.

    ``instant_transfer`` moves goods along roads immediately and sells only on
    player request. ``continuous_flow`` moves goods with truck lines every day
    and sells up to market demand automatically.
    """

    INSTANT_TRANSFER = "instant_transfer"
    CONTINUOUS_FLOW = "continuous_flow"


class TickSpeed(StrEnum):
    """Named simulation speeds selectable by the player."""

    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"
    VERY_FAST = "very_fast"


class ChallengeStatus(StrEnum):
    """Lifecycle stages of the timed unlock challenge."""

    NO_TARGET = "no_target"
    ACTIVE = "active"
    EXPIRED = "expired"
    VICTORY = "victory"


__all__ = [
    "ChallengeStatus",
    "FacilityType",
    "GoodCategory",
    "SimulationPolicy",
    "TickSpeed",
]
