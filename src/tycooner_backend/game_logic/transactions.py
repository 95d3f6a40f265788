"""Validated player actions that mutate the economy.

Every public function takes the current :class:`GameState` and the session
:class:`EconomyConfiguration` and returns a :class:`TransactionResult`. The
operation bodies validate first and raise a :class:`TransactionRejectedError`
subclass on the first failed precondition; only then do they derive the new
snapshot. The ``_transaction`` wrapper turns those exceptions into rejected
results carrying the untouched input state.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from datetime import timedelta
from enum import StrEnum
from functools import wraps
from typing import TYPE_CHECKING, Any, ClassVar, Concatenate, ParamSpec

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from tycooner_backend.game_logic.challenge import after_unlock
from tycooner_backend.game_logic.configuration import (
    EconomyConfiguration,  # noqa: TC001
)
from tycooner_backend.game_logic.logistics import (
    build_road as make_road,
)
from tycooner_backend.game_logic.logistics import (
    build_truck_line,
    move_goods,
)
from tycooner_backend.game_logic.production import (
    daily_output,
    facility_limit,
    good_for,
    new_facility,
)
from tycooner_backend.game_logic.state import (
    GameState,
    LegacyFactory,
    Warehouse,
    market_key,
)
from tycooner_backend.shared.enums import FacilityType, SimulationPolicy
from tycooner_backend.shared.events import LoggedEvent

if TYPE_CHECKING:
    from datetime import datetime

    from tycooner_backend.game_logic.state import Country
    from tycooner_backend.shared.rng import DeterministicRandomService
    from tycooner_backend.shared.value_objects import Money

_P = ParamSpec("_P")

_HIDDEN_ARGUMENTS = frozenset({"state", "configuration", "rng", "now"})


class TransactionOutcome(StrEnum):
    """How a transaction ended."""

    APPLIED = "applied"
    NOOP = "noop"
    REJECTED = "rejected"


class RejectionReason(StrEnum):
    """Taxonomy of rejected transactions."""

    INSUFFICIENT_FUNDS = "insufficient_funds"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    PRECONDITION_FAILED = "precondition_failed"
    FACILITY_WARNING = "facility_warning"


class TransactionRejectedError(Exception):
    """Base class for every validation failure inside a transaction."""

    reason: ClassVar[RejectionReason] = RejectionReason.PRECONDITION_FAILED

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class InsufficientFundsError(TransactionRejectedError):
    """Raised when the balance cannot cover a cost."""

    reason = RejectionReason.INSUFFICIENT_FUNDS

    def __init__(self, required: Money, available: Money) -> None:
        super().__init__(
            f"Not enough money: need {required.amount:,.2f}, "
            f"have {available.amount:,.2f}.",
            {"required": str(required.amount), "available": str(available.amount)},
        )


class CapacityExceededError(TransactionRejectedError):
    """Raised when a warehouse is full or a facility limit is reached."""

    reason = RejectionReason.CAPACITY_EXCEEDED


class PreconditionFailedError(TransactionRejectedError):
    """Raised when the action does not apply to the current state."""

    reason = RejectionReason.PRECONDITION_FAILED


class FacilityWarningError(TransactionRejectedError):
    """Raised when expanding before owning a single production facility."""

    reason = RejectionReason.FACILITY_WARNING


class TransactionSkippedError(Exception):
    """Raised when an action is already satisfied and silently does nothing."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransactionResult(BaseModel):
    """State produced by a transaction plus how it ended."""

    model_config = ConfigDict(frozen=True)

    action: str
    outcome: TransactionOutcome
    state: GameState
    reason: RejectionReason | None = None
    message: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)
    event: LoggedEvent

    @property
    def applied(self) -> bool:
        """Return whether the transaction changed the economy."""
        return self.outcome is TransactionOutcome.APPLIED

    @property
    def rejected(self) -> bool:
        """Return whether the transaction was refused."""
        return self.outcome is TransactionOutcome.REJECTED


def _build_result(
    action: str,
    outcome: TransactionOutcome,
    state: GameState,
    arguments: dict[str, Any],
    *,
    reason: RejectionReason | None = None,
    message: str | None = None,
    detail: dict[str, Any] | None = None,
) -> TransactionResult:
    country_id = arguments.get("country_id") or arguments.get("from_country_id")
    event = LoggedEvent(
        day_index=state.current_day,
        event_type=f"{action}_{outcome.value}",
        message=message,
        country_id=country_id or None,
        payload={
            "arguments": arguments,
            "reason": reason.value if reason else None,
            **(detail or {}),
        },
    )
    return TransactionResult(
        action=action,
        outcome=outcome,
        state=state,
        reason=reason,
        message=message,
        detail=detail or {},
        event=event,
    )


def _transaction(
    action: str,
) -> Callable[
    [Callable[Concatenate[GameState, EconomyConfiguration, _P], GameState]],
    Callable[Concatenate[GameState, EconomyConfiguration, _P], TransactionResult],
]:
    """Wrap an operation body so validation errors become rejected results."""

    def decorator(
        operation: Callable[Concatenate[GameState, EconomyConfiguration, _P], GameState],
    ) -> Callable[Concatenate[GameState, EconomyConfiguration, _P], TransactionResult]:
        signature = inspect.signature(operation)

        @wraps(operation)
        def wrapper(
            state: GameState,
            configuration: EconomyConfiguration,
            *args: _P.args,
            **kwargs: _P.kwargs,
        ) -> TransactionResult:
            bound = signature.bind(state, configuration, *args, **kwargs)
            arguments = {
                name: value if isinstance(value, (int, bool)) else str(value)
                for name, value in bound.arguments.items()
                if name not in _HIDDEN_ARGUMENTS
            }
            try:
                if state.challenge.game_over:
                    msg = "The session is over; restart to keep playing."
                    raise PreconditionFailedError(msg)
                updated = operation(state, configuration, *args, **kwargs)
            except TransactionSkippedError as skipped:
                return _build_result(
                    action,
                    TransactionOutcome.NOOP,
                    state,
                    arguments,
                    message=skipped.message,
                )
            except TransactionRejectedError as exc:
                flagged = (
                    state.model_copy(update={"facility_warning": True})
                    if isinstance(exc, FacilityWarningError)
                    else state
                )
                return _build_result(
                    action,
                    TransactionOutcome.REJECTED,
                    flagged,
                    arguments,
                    reason=exc.reason,
                    message=exc.message,
                    detail=exc.detail,
                )
            return _build_result(
                action, TransactionOutcome.APPLIED, updated, arguments
            )

        return wrapper

    return decorator


def _require_country(state: GameState, country_id: str) -> Country:
    country = state.countries.get(country_id)
    if country is None:
        msg = f"Unknown country {country_id}."
        raise PreconditionFailedError(msg)
    return country


def _require_unlocked(state: GameState, country_id: str) -> Country:
    country = _require_country(state, country_id)
    if not state.is_unlocked(country_id):
        msg = f"{country.name} must be unlocked first."
        raise PreconditionFailedError(msg)
    return country


def _require_warehouse(state: GameState, country_id: str) -> Warehouse:
    warehouse = state.warehouses.get(country_id)
    if warehouse is None:
        msg = f"Build a warehouse in {country_id} first."
        raise PreconditionFailedError(msg)
    return warehouse


def _require_funds(state: GameState, cost: Money) -> None:
    if not state.money.covers(cost):
        raise InsufficientFundsError(cost, state.money)


def _require_good(state: GameState, good_id: str) -> None:
    if good_id not in state.goods:
        msg = f"Unknown good {good_id}."
        raise PreconditionFailedError(msg)


def _require_policy(
    configuration: EconomyConfiguration, policy: SimulationPolicy
) -> None:
    if configuration.policy is not policy:
        msg = f"This action needs the {policy.value} policy."
        raise PreconditionFailedError(msg, {"policy": configuration.policy.value})


@_transaction("build_warehouse")
def build_warehouse(
    state: GameState, configuration: EconomyConfiguration, country_id: str
) -> GameState:
    """Build the single warehouse of *country_id*; a second call does nothing."""
    if country_id in state.warehouses:
        msg = f"{country_id} already has a warehouse."
        raise TransactionSkippedError(msg)
    _require_unlocked(state, country_id)
    cost = configuration.money(configuration.warehouse_build_cost)
    _require_funds(state, cost)

    warehouse = Warehouse(
        country_id=country_id,
        level=1,
        capacity=configuration.warehouse_base_capacity,
        storage={},
    )
    return state.debit_money(cost).with_warehouse(warehouse)


@_transaction("upgrade_warehouse")
def upgrade_warehouse(
    state: GameState, configuration: EconomyConfiguration, country_id: str
) -> GameState:
    """Raise the warehouse one level; the price grows with the current level."""
    warehouse = _require_warehouse(state, country_id)
    cost = configuration.money(
        configuration.warehouse_upgrade_base_cost * warehouse.level
    )
    _require_funds(state, cost)

    upgraded = warehouse.upgraded(configuration.warehouse_capacity_increase)
    return state.debit_money(cost).with_warehouse(upgraded)


@_transaction("build_facility")
def build_facility(
    state: GameState,
    configuration: EconomyConfiguration,
    country_id: str,
    facility_type: FacilityType,
) -> GameState:
    """Add one production facility, bounded by the country's population."""
    country = _require_unlocked(state, country_id)
    _require_warehouse(state, country_id)
    pricing = country.production_pricing
    if pricing is None:
        msg = f"No facility pricing is available for {country.name}."
        raise PreconditionFailedError(msg)
    cost = configuration.money(pricing.build_cost(facility_type))
    _require_funds(state, cost)

    production = state.production_for(country_id)
    limit = facility_limit(country.population, facility_type)
    if production.count(facility_type) >= limit:
        msg = f"Limit reached for {facility_type} buildings (max {limit})."
        raise CapacityExceededError(msg, {"limit": limit})

    updated = production.add(new_facility(facility_type))
    return state.debit_money(cost).with_production(updated)


@_transaction("destroy_facility")
def destroy_facility(
    state: GameState,
    configuration: EconomyConfiguration,
    country_id: str,
    facility_type: FacilityType,
) -> GameState:
    """Demolish the most recently built facility of *facility_type*."""
    production = state.production.get(country_id)
    if production is None or production.count(facility_type) == 0:
        msg = f"No {facility_type} to destroy in {country_id}."
        raise PreconditionFailedError(msg)
    return state.with_production(production.remove_newest(facility_type))


@_transaction("unlock_country")
def unlock_country(
    state: GameState,
    configuration: EconomyConfiguration,
    country_id: str,
    *,
    rng: DeterministicRandomService,
    now: datetime,
    free: bool = False,
) -> GameState:
    """Add *country_id* to the player's territory and advance the challenge."""
    _require_country(state, country_id)
    if state.is_unlocked(country_id):
        msg = f"{country_id} is already unlocked."
        raise TransactionSkippedError(msg)

    unlocked_count = len(state.unlocked_countries)
    if unlocked_count > 0 and state.total_facilities() == 0:
        msg = "Build at least one production facility before expanding."
        raise FacilityWarningError(msg)

    cost = (
        configuration.money(0)
        if free
        else configuration.unlock_cost(unlocked_count)
    )
    _require_funds(state, cost)

    updated = state.debit_money(cost).with_unlocked(country_id)
    duration = timedelta(seconds=configuration.challenge_duration_seconds)
    return after_unlock(updated, rng, now, duration)


@_transaction("build_road")
def build_road(
    state: GameState,
    configuration: EconomyConfiguration,
    from_country_id: str,
    to_country_id: str,
) -> GameState:
    """Connect two unlocked neighboring countries with a road."""
    origin = _require_unlocked(state, from_country_id)
    destination = _require_unlocked(state, to_country_id)
    if not origin.is_neighbor(to_country_id):
        msg = "Roads can only be built between neighboring countries."
        raise PreconditionFailedError(msg)
    if state.find_road(from_country_id, to_country_id) is not None:
        msg = f"A road between {from_country_id} and {to_country_id} already exists."
        raise PreconditionFailedError(msg)
    cost = configuration.money(configuration.road_build_cost)
    _require_funds(state, cost)

    return state.debit_money(cost).with_road(make_road(origin, destination))


@_transaction("transfer_goods")
def transfer_goods(
    state: GameState,
    configuration: EconomyConfiguration,
    from_country_id: str,
    to_country_id: str,
    good_id: str,
    amount: int,
) -> GameState:
    """Move goods instantly along a road; the destination's free space caps the move."""
    _require_policy(configuration, SimulationPolicy.INSTANT_TRANSFER)
    if amount <= 0:
        msg = "Transfer amount must be positive."
        raise PreconditionFailedError(msg)
    source = state.warehouses.get(from_country_id)
    destination = state.warehouses.get(to_country_id)
    if source is None or destination is None:
        msg = "Both countries need warehouses."
        raise PreconditionFailedError(msg)
    if state.find_road(from_country_id, to_country_id) is None:
        msg = "No road between these countries."
        raise PreconditionFailedError(msg)
    if source.quantity(good_id) < amount:
        msg = "Not enough goods to transfer."
        raise PreconditionFailedError(
            msg, {"available": source.quantity(good_id)}
        )
    space = destination.free_capacity()
    if space <= 0:
        msg = "Destination warehouse is full."
        raise CapacityExceededError(msg)

    source, destination = move_goods(source, destination, good_id, min(amount, space))
    return state.with_warehouse(source).with_warehouse(destination)


@_transaction("sell_good")
def sell_good(
    state: GameState,
    configuration: EconomyConfiguration,
    country_id: str,
    good_id: str,
) -> GameState:
    """Sell the whole stock of *good_id* at the local market price."""
    _require_policy(configuration, SimulationPolicy.INSTANT_TRANSFER)
    warehouse = _require_warehouse(state, country_id)
    stock = warehouse.quantity(good_id)
    if stock <= 0:
        msg = f"No {good_id} in stock to sell."
        raise PreconditionFailedError(msg)
    market = state.markets.get(market_key(country_id, good_id))
    if market is None:
        msg = f"No market for {good_id} in {country_id}."
        raise PreconditionFailedError(msg)

    revenue = configuration.money(market.current_price * stock)
    return state.credit_money(revenue).with_warehouse(
        warehouse.withdraw(good_id, stock)
    )


@_transaction("sell_production_output")
def sell_production_output(
    state: GameState,
    configuration: EconomyConfiguration,
    country_id: str,
    facility_type: FacilityType,
) -> GameState:
    """Sell one day's worth of a facility type's output at the local price list."""
    _require_policy(configuration, SimulationPolicy.INSTANT_TRANSFER)
    country = _require_country(state, country_id)
    production = state.production.get(country_id)
    if production is None or production.count(facility_type) == 0:
        msg = f"No {facility_type} buildings in {country.name}."
        raise PreconditionFailedError(msg)
    pricing = country.production_pricing
    if pricing is None:
        msg = f"No facility pricing is available for {country.name}."
        raise PreconditionFailedError(msg)
    warehouse = _require_warehouse(state, country_id)
    good_id = good_for(facility_type)
    sold = min(warehouse.quantity(good_id), daily_output(production, facility_type))
    if sold <= 0:
        msg = f"No {good_id} in stock to sell."
        raise PreconditionFailedError(msg)

    revenue = configuration.money(pricing.sell_price(facility_type) * sold)
    return state.credit_money(revenue).with_warehouse(
        warehouse.withdraw(good_id, sold)
    )


@_transaction("build_factory")
def build_factory(
    state: GameState,
    configuration: EconomyConfiguration,
    country_id: str,
    good_id: str,
) -> GameState:
    """Build a single-good factory with upgradeable output."""
    _require_policy(configuration, SimulationPolicy.CONTINUOUS_FLOW)
    _require_unlocked(state, country_id)
    _require_warehouse(state, country_id)
    _require_good(state, good_id)
    cost = configuration.money(configuration.legacy_factory_build_cost)
    _require_funds(state, cost)

    factory = LegacyFactory(
        id=f"factory-{len(state.factories) + 1}",
        country_id=country_id,
        good_id=good_id,
        level=1,
        output_per_day=configuration.legacy_factory_base_output,
    )
    return state.debit_money(cost).with_factory(factory)


@_transaction("upgrade_factory")
def upgrade_factory(
    state: GameState, configuration: EconomyConfiguration, factory_id: str
) -> GameState:
    """Raise a factory one level, increasing its daily output."""
    _require_policy(configuration, SimulationPolicy.CONTINUOUS_FLOW)
    factory = state.factories.get(factory_id)
    if factory is None:
        msg = f"Unknown factory {factory_id}."
        raise PreconditionFailedError(msg)
    cost = configuration.money(
        configuration.legacy_factory_upgrade_base_cost * factory.level
    )
    _require_funds(state, cost)

    upgraded = factory.upgraded(configuration.legacy_factory_output_increase)
    return state.debit_money(cost).with_factory(upgraded)


@_transaction("create_truck_line")
def create_truck_line(
    state: GameState,
    configuration: EconomyConfiguration,
    road_id: str,
    good_id: str,
    trucks: int,
) -> GameState:
    """Assign trucks to haul *good_id* along a road every day."""
    _require_policy(configuration, SimulationPolicy.CONTINUOUS_FLOW)
    road = state.roads.get(road_id)
    if road is None:
        msg = f"Unknown road {road_id}."
        raise PreconditionFailedError(msg)
    _require_good(state, good_id)
    if trucks < 1:
        msg = "A truck line needs at least one truck."
        raise PreconditionFailedError(msg)

    line = build_truck_line(
        f"truckline-{len(state.truck_lines) + 1}",
        road,
        good_id,
        trucks,
        configuration.truck_capacity,
    )
    return state.with_truck_line(line)


@_transaction("update_truck_line")
def update_truck_line(
    state: GameState,
    configuration: EconomyConfiguration,
    truck_line_id: str,
    trucks: int,
) -> GameState:
    """Change how many trucks serve a line; zero parks the line."""
    _require_policy(configuration, SimulationPolicy.CONTINUOUS_FLOW)
    line = state.truck_lines.get(truck_line_id)
    if line is None:
        msg = f"Unknown truck line {truck_line_id}."
        raise PreconditionFailedError(msg)
    if trucks < 0:
        msg = "Truck count must be non-negative."
        raise PreconditionFailedError(msg)
    return state.with_truck_line(line.model_copy(update={"trucks_assigned": trucks}))


def dismiss_facility_warning(state: GameState) -> GameState:
    """Clear the advisory raised by a refused early expansion."""
    if not state.facility_warning:
        return state
    return state.model_copy(update={"facility_warning": False})


__all__ = [
    "CapacityExceededError",
    "FacilityWarningError",
    "InsufficientFundsError",
    "PreconditionFailedError",
    "RejectionReason",
    "TransactionOutcome",
    "TransactionRejectedError",
    "TransactionResult",
    "TransactionSkippedError",
    "build_factory",
    "build_facility",
    "build_road",
    "build_warehouse",
    "create_truck_line",
    "destroy_facility",
    "dismiss_facility_warning",
    "sell_good",
    "sell_production_output",
    "transfer_goods",
    "unlock_country",
    "update_truck_line",
    "upgrade_factory",
    "upgrade_warehouse",
]
