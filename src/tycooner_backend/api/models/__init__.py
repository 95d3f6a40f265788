"""Models used for API request and response payloads."""

from tycooner_backend.api.models.game import (
    ChallengeCheckResponse,
    DayTickResponse,
    GameActionRequest,
    GameStateResponse,
    NotificationsResponse,
    PriceLedgerResponse,
    SpeedRequest,
    TransactionErrorResponse,
    TransactionResponse,
    UnlockCostResponse,
)

__all__ = [
    "ChallengeCheckResponse",
    "DayTickResponse",
    "GameActionRequest",
    "GameStateResponse",
    "NotificationsResponse",
    "PriceLedgerResponse",
    "SpeedRequest",
    "TransactionErrorResponse",
    "TransactionResponse",
    "UnlockCostResponse",
]
