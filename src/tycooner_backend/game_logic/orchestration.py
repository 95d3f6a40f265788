"""Single-session coordinator connecting the rules to external callers.

The coordinator owns the current :class:`GameState` snapshot. Player actions,
day ticks and challenge checks all read the snapshot, compute a new one and
publish it under one re-entrant lock, so two callers never apply updates on
top of the same stale snapshot.
"""

from __future__ import annotations

import threading
from collections import deque
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from tycooner_backend.game_logic import transactions
from tycooner_backend.game_logic.bootstrap import create_initial_state
from tycooner_backend.game_logic.challenge import challenge_status, check_deadline
from tycooner_backend.game_logic.configuration import (
    TICK_SPEED_INTERVALS_MS,
    EconomyConfiguration,
    get_default_economy_configuration,
)
from tycooner_backend.game_logic.engine import DayEngine, DayResult
from tycooner_backend.game_logic.production import PriceLedgerEntry, price_ledger
from tycooner_backend.shared.enums import ChallengeStatus, FacilityType, TickSpeed
from tycooner_backend.shared.events import LoggedEvent
from tycooner_backend.shared.rng import DeterministicRandomService

if TYPE_CHECKING:
    from collections.abc import Callable

    from tycooner_backend.game_logic.reference_data import GeoDataset
    from tycooner_backend.game_logic.state import GameState
    from tycooner_backend.game_logic.transactions import TransactionResult
    from tycooner_backend.shared.value_objects import Money

DEFAULT_NOTIFICATION_LIMIT = 200


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class GameCoordinator:
    """Own one game session and serialize every update to it."""

    def __init__(
        self,
        configuration: EconomyConfiguration | None = None,
        *,
        dataset: GeoDataset | None = None,
        engine: DayEngine | None = None,
        rng_service: DeterministicRandomService | None = None,
        clock: Callable[[], datetime] | None = None,
        notification_limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> None:
        if notification_limit <= 0:
            msg = "Notification limit must be positive."
            raise ValueError(msg)
        self._configuration = configuration or get_default_economy_configuration()
        self._dataset = dataset
        self._engine = engine or DayEngine()
        self._rng = rng_service or DeterministicRandomService(
            self._configuration.rng_seed
        )
        self._clock = clock or _utcnow
        self._lock = threading.RLock()
        self._notifications: deque[LoggedEvent] = deque(maxlen=notification_limit)
        self._state = create_initial_state(self._configuration, dataset)
        self._last_day: DayResult | None = None

    @property
    def configuration(self) -> EconomyConfiguration:
        """Return the session configuration."""
        return self._configuration

    @property
    def state(self) -> GameState:
        """Return the latest published snapshot."""
        with self._lock:
            return self._state

    @property
    def last_day(self) -> DayResult | None:
        """Return the result of the most recent simulated day."""
        with self._lock:
            return self._last_day

    def notifications(self, limit: int | None = None) -> tuple[LoggedEvent, ...]:
        """Return the newest journal entries, oldest first."""
        with self._lock:
            events = tuple(self._notifications)
        if limit is not None:
            events = events[-limit:] if limit > 0 else ()
        return events

    def challenge_status(self) -> ChallengeStatus:
        """Return the derived state of the progression controller."""
        return challenge_status(self.state)

    def record_failure(self, source: str, error: Exception) -> LoggedEvent:
        """Journal an error raised by a background driver step."""
        with self._lock:
            event = LoggedEvent(
                day_index=self._state.current_day,
                event_type=f"{source}_failed",
                message=str(error) or type(error).__name__,
                payload={"error": type(error).__name__},
            )
            self._notifications.append(event)
            return event

    def now(self) -> datetime:
        """Return the coordinator's notion of the current time."""
        return self._clock()

    # Simulation ---------------------------------------------------------

    def advance_day(self) -> DayResult | None:
        """Simulate one day unless the session is paused or over."""
        with self._lock:
            if self._state.is_paused or self._state.challenge.game_over:
                return None
            result = self._engine.run_day(self._state, self._configuration)
            self._state = result.final_state
            self._last_day = result
            self._notifications.extend(result.log.events())
            return result

    def check_challenge(self) -> ChallengeStatus:
        """Expire a missed deadline or roll over a completed target."""
        with self._lock:
            before = self._state.challenge
            updated = check_deadline(
                self._state, self._rng, self._clock(), self._challenge_duration()
            )
            self._state = updated
            if updated.challenge != before:
                self._record_challenge_change(updated)
            return challenge_status(updated)

    def restart(self) -> GameState:
        """Throw the session away and start over from the initial state."""
        with self._lock:
            self._rng.reseed(self._configuration.rng_seed)
            self._state = create_initial_state(self._configuration, self._dataset)
            self._last_day = None
            self._notifications.clear()
            return self._state

    def set_speed(self, speed: TickSpeed) -> GameState:
        """Switch the day tick to one of the named speeds."""
        return self.set_tick_interval(TICK_SPEED_INTERVALS_MS[speed])

    def set_tick_interval(self, interval_ms: int) -> GameState:
        """Set how many milliseconds pass between simulated days."""
        if interval_ms <= 0:
            msg = "Tick interval must be positive."
            raise ValueError(msg)
        return self._update(tick_interval_ms=interval_ms)

    def pause(self) -> GameState:
        """Stop scheduled day ticks; actions remain available."""
        return self._update(is_paused=True)

    def resume(self) -> GameState:
        """Resume scheduled day ticks."""
        return self._update(is_paused=False)

    def dismiss_facility_warning(self) -> GameState:
        with self._lock:
            self._state = transactions.dismiss_facility_warning(self._state)
            return self._state

    # Queries ------------------------------------------------------------

    def next_unlock_cost(self) -> Money:
        """Return what unlocking one more country costs right now."""
        with self._lock:
            return self._configuration.unlock_cost(len(self._state.unlocked_countries))

    def price_ledger(
        self, facility_type: FacilityType, *, descending: bool = False
    ) -> list[PriceLedgerEntry]:
        """Rank countries by the local price of *facility_type*'s good."""
        state = self.state
        return price_ledger(
            state.countries.values(),
            facility_type,
            unlocked=state.unlocked_countries,
            descending=descending,
        )

    # Actions ------------------------------------------------------------

    def build_warehouse(self, country_id: str) -> TransactionResult:
        return self._apply(transactions.build_warehouse, country_id)

    def upgrade_warehouse(self, country_id: str) -> TransactionResult:
        return self._apply(transactions.upgrade_warehouse, country_id)

    def build_facility(
        self, country_id: str, facility_type: FacilityType
    ) -> TransactionResult:
        return self._apply(transactions.build_facility, country_id, facility_type)

    def destroy_facility(
        self, country_id: str, facility_type: FacilityType
    ) -> TransactionResult:
        return self._apply(transactions.destroy_facility, country_id, facility_type)

    def unlock_country(self, country_id: str, *, free: bool = False) -> TransactionResult:
        """Unlock *country_id*, starting or advancing the timed challenge."""
        with self._lock:
            before = self._state.challenge
            result = self._apply(
                transactions.unlock_country,
                country_id,
                rng=self._rng,
                now=self._clock(),
                free=free,
            )
            if result.state.challenge != before:
                self._record_challenge_change(result.state)
            return result

    def build_road(self, from_country_id: str, to_country_id: str) -> TransactionResult:
        return self._apply(transactions.build_road, from_country_id, to_country_id)

    def transfer_goods(
        self, from_country_id: str, to_country_id: str, good_id: str, amount: int
    ) -> TransactionResult:
        return self._apply(
            transactions.transfer_goods,
            from_country_id,
            to_country_id,
            good_id,
            amount,
        )

    def sell_good(self, country_id: str, good_id: str) -> TransactionResult:
        return self._apply(transactions.sell_good, country_id, good_id)

    def sell_production_output(
        self, country_id: str, facility_type: FacilityType
    ) -> TransactionResult:
        return self._apply(
            transactions.sell_production_output, country_id, facility_type
        )

    def build_factory(self, country_id: str, good_id: str) -> TransactionResult:
        return self._apply(transactions.build_factory, country_id, good_id)

    def upgrade_factory(self, factory_id: str) -> TransactionResult:
        return self._apply(transactions.upgrade_factory, factory_id)

    def create_truck_line(
        self, road_id: str, good_id: str, trucks: int
    ) -> TransactionResult:
        return self._apply(transactions.create_truck_line, road_id, good_id, trucks)

    def update_truck_line(self, truck_line_id: str, trucks: int) -> TransactionResult:
        return self._apply(transactions.update_truck_line, truck_line_id, trucks)

    # Internals ----------------------------------------------------------

    def _apply(
        self,
        operation: Callable[..., TransactionResult],
        *args: Any,
        **kwargs: Any,
    ) -> TransactionResult:
        with self._lock:
            result = operation(self._state, self._configuration, *args, **kwargs)
            self._state = result.state
            self._notifications.append(result.event)
            return result

    def _update(self, **changes: Any) -> GameState:
        with self._lock:
            self._state = self._state.model_copy(update=changes)
            return self._state

    def _challenge_duration(self) -> timedelta:
        return timedelta(seconds=self._configuration.challenge_duration_seconds)

    def _record_challenge_change(self, state: GameState) -> None:
        status = challenge_status(state)
        challenge = state.challenge
        if status is ChallengeStatus.ACTIVE:
            message = f"New challenge: unlock {challenge.target_country_id}."
        elif status is ChallengeStatus.VICTORY:
            message = "Every country is unlocked."
        elif status is ChallengeStatus.EXPIRED:
            message = "The challenge deadline passed."
        else:
            message = None
        self._notifications.append(
            LoggedEvent(
                day_index=state.current_day,
                event_type=f"challenge_{status.value}",
                message=message,
                country_id=challenge.target_country_id,
                payload={
                    "deadline": (
                        challenge.deadline.isoformat() if challenge.deadline else None
                    ),
                },
            )
        )


__all__ = ["DEFAULT_NOTIFICATION_LIMIT", "GameCoordinator"]
