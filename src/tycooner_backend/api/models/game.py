"""Pydantic models for the game HTTP contract."""

# ruff: noqa: TC001

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, Field, model_validator

from tycooner_backend.game_logic.production import PriceLedgerEntry
from tycooner_backend.game_logic.state import GameState
from tycooner_backend.game_logic.transactions import (
    RejectionReason,
    TransactionOutcome,
    TransactionResult,
)
from tycooner_backend.shared.enums import ChallengeStatus, FacilityType, TickSpeed
from tycooner_backend.shared.events import LoggedEvent
from tycooner_backend.shared.value_objects import Money

if TYPE_CHECKING:
    from tycooner_backend.game_logic.orchestration import GameCoordinator


class BuildWarehouseAction(BaseModel):
    """Build the warehouse of a country."""

    kind: Literal["build_warehouse"]
    country_id: str

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.build_warehouse(self.country_id)


class UpgradeWarehouseAction(BaseModel):
    kind: Literal["upgrade_warehouse"]
    country_id: str

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.upgrade_warehouse(self.country_id)


class BuildFacilityAction(BaseModel):
    """Add one farm, factory or ranch."""

    kind: Literal["build_facility"]
    country_id: str
    facility_type: FacilityType

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.build_facility(self.country_id, self.facility_type)


class DestroyFacilityAction(BaseModel):
    kind: Literal["destroy_facility"]
    country_id: str
    facility_type: FacilityType

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.destroy_facility(self.country_id, self.facility_type)


class UnlockCountryAction(BaseModel):
    """Expand into another country."""

    kind: Literal["unlock_country"]
    country_id: str
    free: bool = False

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.unlock_country(self.country_id, free=self.free)


class BuildRoadAction(BaseModel):
    kind: Literal["build_road"]
    from_country_id: str
    to_country_id: str

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.build_road(self.from_country_id, self.to_country_id)


class TransferGoodsAction(BaseModel):
    """Move goods between two connected warehouses."""

    kind: Literal["transfer_goods"]
    from_country_id: str
    to_country_id: str
    good_id: str
    amount: int

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.transfer_goods(
            self.from_country_id, self.to_country_id, self.good_id, self.amount
        )


class SellGoodAction(BaseModel):
    kind: Literal["sell_good"]
    country_id: str
    good_id: str

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.sell_good(self.country_id, self.good_id)


class SellProductionOutputAction(BaseModel):
    kind: Literal["sell_production_output"]
    country_id: str
    facility_type: FacilityType

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.sell_production_output(self.country_id, self.facility_type)


class BuildFactoryAction(BaseModel):
    kind: Literal["build_factory"]
    country_id: str
    good_id: str

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.build_factory(self.country_id, self.good_id)


class UpgradeFactoryAction(BaseModel):
    kind: Literal["upgrade_factory"]
    factory_id: str

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.upgrade_factory(self.factory_id)


class CreateTruckLineAction(BaseModel):
    kind: Literal["create_truck_line"]
    road_id: str
    good_id: str
    trucks: int = Field(ge=1)

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.create_truck_line(self.road_id, self.good_id, self.trucks)


class UpdateTruckLineAction(BaseModel):
    kind: Literal["update_truck_line"]
    truck_line_id: str
    trucks: int = Field(ge=0)

    def apply(self, coordinator: GameCoordinator) -> TransactionResult:
        return coordinator.update_truck_line(self.truck_line_id, self.trucks)


GameActionRequest = Annotated[
    BuildWarehouseAction
    | UpgradeWarehouseAction
    | BuildFacilityAction
    | DestroyFacilityAction
    | UnlockCountryAction
    | BuildRoadAction
    | TransferGoodsAction
    | SellGoodAction
    | SellProductionOutputAction
    | BuildFactoryAction
    | UpgradeFactoryAction
    | CreateTruckLineAction
    | UpdateTruckLineAction,
    Field(discriminator="kind"),
]


class GameStateResponse(BaseModel):
    """Current snapshot plus values derived from it."""

    state: GameState
    challenge_status: ChallengeStatus
    next_unlock_cost: Money


class TransactionResponse(BaseModel):
    """Outcome of an applied or skipped action."""

    action: str
    outcome: TransactionOutcome
    message: str | None = None
    state: GameState


class TransactionErrorResponse(BaseModel):
    """Body returned with HTTP 409 when an action is rejected."""

    action: str
    reason: RejectionReason
    message: str
    detail: dict[str, object] = Field(default_factory=dict)


class DayTickResponse(BaseModel):
    """Result of a manually triggered day."""

    advanced: bool
    day_index: int
    summaries: list[str] = Field(default_factory=list)
    state: GameState


class ChallengeCheckResponse(BaseModel):
    status: ChallengeStatus
    target_country_id: str | None
    state: GameState


class SpeedRequest(BaseModel):
    """Either a named speed or an explicit interval in milliseconds."""

    speed: TickSpeed | None = None
    interval_ms: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _validate_exactly_one(self) -> SpeedRequest:
        if (self.speed is None) == (self.interval_ms is None):
            msg = "Provide exactly one of speed or interval_ms."
            raise ValueError(msg)
        return self


class UnlockCostResponse(BaseModel):
    unlocked_count: int
    cost: Money


class PriceLedgerResponse(BaseModel):
    facility_type: FacilityType
    descending: bool
    entries: list[PriceLedgerEntry]


class NotificationsResponse(BaseModel):
    events: list[LoggedEvent]


__all__ = [
    "BuildFacilityAction",
    "BuildFactoryAction",
    "BuildRoadAction",
    "BuildWarehouseAction",
    "ChallengeCheckResponse",
    "CreateTruckLineAction",
    "DayTickResponse",
    "DestroyFacilityAction",
    "GameActionRequest",
    "GameStateResponse",
    "NotificationsResponse",
    "PriceLedgerResponse",
    "SellGoodAction",
    "SellProductionOutputAction",
    "SpeedRequest",
    "TransactionErrorResponse",
    "TransactionResponse",
    "TransferGoodsAction",
    "UnlockCostResponse",
    "UnlockCountryAction",
    "UpdateTruckLineAction",
    "UpgradeFactoryAction",
    "UpgradeWarehouseAction",
]
