"""Core rules and mechanics that drive the Tycooner economy."""

from tycooner_backend.game_logic.bootstrap import create_initial_state
from tycooner_backend.game_logic.configuration import (
    EconomyConfiguration,
    EconomyDefaults,
    SessionOverrides,
    build_session_configuration,
    get_default_economy_configuration,
)
from tycooner_backend.game_logic.drivers import ChallengeClockDriver, DayTickDriver
from tycooner_backend.game_logic.engine import DayEngine, DayResult
from tycooner_backend.game_logic.handlers import (
    LogisticsPhaseHandlerImpl,
    MarketPhaseHandlerImpl,
    ProductionPhaseHandlerImpl,
)
from tycooner_backend.game_logic.orchestration import GameCoordinator
from tycooner_backend.game_logic.phases import (
    PhaseHandlers,
    PhaseInputBase,
    PhaseResultBase,
)
from tycooner_backend.game_logic.state import (
    ChallengeState,
    Country,
    CountryProduction,
    GameState,
    LegacyFactory,
    Market,
    Road,
    TruckLine,
    Warehouse,
)
from tycooner_backend.game_logic.transactions import (
    RejectionReason,
    TransactionOutcome,
    TransactionResult,
)

__all__ = [
    "ChallengeClockDriver",
    "ChallengeState",
    "Country",
    "CountryProduction",
    "DayEngine",
    "DayResult",
    "DayTickDriver",
    "EconomyConfiguration",
    "EconomyDefaults",
    "GameCoordinator",
    "GameState",
    "LegacyFactory",
    "LogisticsPhaseHandlerImpl",
    "Market",
    "MarketPhaseHandlerImpl",
    "PhaseHandlers",
    "PhaseInputBase",
    "PhaseResultBase",
    "ProductionPhaseHandlerImpl",
    "RejectionReason",
    "Road",
    "SessionOverrides",
    "TransactionOutcome",
    "TransactionResult",
    "TruckLine",
    "Warehouse",
    "build_session_configuration",
    "create_initial_state",
    "get_default_economy_configuration",
]
