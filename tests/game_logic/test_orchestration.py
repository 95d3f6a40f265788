from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from tycooner_backend.game_logic.bootstrap import create_initial_state
from tycooner_backend.game_logic.configuration import EconomyConfiguration
from tycooner_backend.game_logic.orchestration import GameCoordinator
from tycooner_backend.game_logic.reference_data import GeoDataset
from tycooner_backend.game_logic.transactions import RejectionReason
from tycooner_backend.shared.enums import ChallengeStatus, FacilityType, TickSpeed
from tycooner_backend.shared.value_objects import Money


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current += timedelta(**delta)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def coordinator(
    configuration: EconomyConfiguration, dataset: GeoDataset, clock: FakeClock
) -> GameCoordinator:
    return GameCoordinator(configuration, dataset=dataset, clock=clock)


def establish(coordinator: GameCoordinator) -> None:
    """Unlock Alpha and give it a warehouse and a farm."""
    assert coordinator.unlock_country("AA").applied
    assert coordinator.build_warehouse("AA").applied
    assert coordinator.build_facility("AA", FacilityType.FARM).applied


def test_actions_publish_new_snapshots(coordinator: GameCoordinator) -> None:
    establish(coordinator)

    state = coordinator.state
    assert state.unlocked_countries == ("AA",)
    assert state.money == Money.of(2000)
    assert state.production["AA"].count(FacilityType.FARM) == 1


def test_advance_day_is_monotonic(coordinator: GameCoordinator) -> None:
    establish(coordinator)

    days = [coordinator.advance_day().day_index for _ in range(3)]

    assert days == [1, 2, 3]
    assert coordinator.state.warehouses["AA"].quantity("grain") == 3
    assert coordinator.last_day is not None
    assert coordinator.last_day.day_index == 3


def test_paused_session_does_not_tick(coordinator: GameCoordinator) -> None:
    coordinator.pause()

    assert coordinator.advance_day() is None
    assert coordinator.state.current_day == 0

    coordinator.resume()
    assert coordinator.advance_day() is not None
    assert coordinator.state.current_day == 1


def test_set_speed_updates_interval(coordinator: GameCoordinator) -> None:
    coordinator.set_speed(TickSpeed.VERY_FAST)
    assert coordinator.state.tick_interval_ms == 500

    coordinator.set_tick_interval(750)
    assert coordinator.state.tick_interval_ms == 750

    with pytest.raises(ValueError, match="positive"):
        coordinator.set_tick_interval(0)


def test_restart_matches_a_fresh_session(
    coordinator: GameCoordinator,
    configuration: EconomyConfiguration,
    dataset: GeoDataset,
) -> None:
    establish(coordinator)
    coordinator.advance_day()
    coordinator.pause()

    restarted = coordinator.restart()

    assert restarted == create_initial_state(configuration, dataset)
    assert coordinator.notifications() == ()
    assert coordinator.last_day is None
    assert coordinator.challenge_status() is ChallengeStatus.NO_TARGET


def test_restart_replays_target_selection(
    configuration: EconomyConfiguration, dataset: GeoDataset, clock: FakeClock
) -> None:
    coordinator = GameCoordinator(configuration, dataset=dataset, clock=clock)

    coordinator.unlock_country("BB")
    first_target = coordinator.state.challenge.target_country_id
    coordinator.restart()
    coordinator.unlock_country("BB")

    assert coordinator.state.challenge.target_country_id == first_target


def test_missed_deadline_stops_the_session(
    coordinator: GameCoordinator, clock: FakeClock
) -> None:
    establish(coordinator)

    clock.advance(seconds=299)
    assert coordinator.check_challenge() is ChallengeStatus.ACTIVE
    clock.advance(seconds=2)
    assert coordinator.check_challenge() is ChallengeStatus.EXPIRED

    assert coordinator.advance_day() is None
    refused = coordinator.build_warehouse("BB")
    assert refused.reason is RejectionReason.PRECONDITION_FAILED
    assert coordinator.notifications(1)[0].event_type == "build_warehouse_rejected"


def test_notifications_record_actions_days_and_challenges(
    coordinator: GameCoordinator,
) -> None:
    establish(coordinator)
    coordinator.build_warehouse("AA")
    coordinator.advance_day()

    event_types = [event.event_type for event in coordinator.notifications()]

    assert event_types[:5] == [
        "unlock_country_applied",
        "challenge_active",
        "build_warehouse_applied",
        "build_facility_applied",
        "build_warehouse_noop",
    ]
    assert "goods_produced" in event_types


def test_notification_journal_is_bounded(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    coordinator = GameCoordinator(configuration, dataset=dataset, notification_limit=3)

    for _ in range(5):
        coordinator.build_warehouse("AA")

    assert len(coordinator.notifications()) == 3
    assert coordinator.notifications(0) == ()


def test_queries(coordinator: GameCoordinator) -> None:
    assert coordinator.next_unlock_cost() == Money.zero()
    establish(coordinator)
    assert coordinator.next_unlock_cost().amount == Decimal(7500)

    ledger = coordinator.price_ledger(FacilityType.FARM, descending=True)
    assert [entry.country_id for entry in ledger] == ["BB", "AA", "CC"]
    assert [entry.unlocked for entry in ledger] == [False, True, False]


def test_facility_warning_can_be_dismissed(coordinator: GameCoordinator) -> None:
    coordinator.unlock_country("AA")

    refused = coordinator.unlock_country("BB")

    assert refused.reason is RejectionReason.FACILITY_WARNING
    assert coordinator.state.facility_warning
    assert not coordinator.dismiss_facility_warning().facility_warning


def test_concurrent_ticks_never_lose_a_day(coordinator: GameCoordinator) -> None:
    establish(coordinator)

    def tick_many() -> None:
        for _ in range(25):
            coordinator.advance_day()

    workers = [threading.Thread(target=tick_many) for _ in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert coordinator.state.current_day == 100
    warehouse = coordinator.state.warehouses["AA"]
    assert warehouse.total_stored() == 60
