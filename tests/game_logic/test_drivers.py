"""Tests for the wall-clock drivers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from tycooner_backend.game_logic.configuration import EconomyConfiguration
from tycooner_backend.game_logic.drivers import ChallengeClockDriver, DayTickDriver
from tycooner_backend.game_logic.engine import DayResult
from tycooner_backend.game_logic.orchestration import GameCoordinator
from tycooner_backend.game_logic.reference_data import GeoDataset
from tycooner_backend.shared.enums import ChallengeStatus


def make_coordinator(
    configuration: EconomyConfiguration,
    dataset: GeoDataset,
    clock: Callable[[], datetime] | None = None,
) -> GameCoordinator:
    coordinator = GameCoordinator(configuration, dataset=dataset, clock=clock)
    coordinator.set_tick_interval(5)
    return coordinator


def test_day_tick_driver_advances_days(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    coordinator = make_coordinator(configuration, dataset)
    driver = DayTickDriver(coordinator)

    async def run() -> None:
        driver.start()
        await asyncio.sleep(0.2)
        await driver.stop()

    asyncio.run(run())

    assert coordinator.state.current_day >= 1
    assert not driver.running


def test_day_tick_driver_skips_paused_session(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    coordinator = make_coordinator(configuration, dataset)
    coordinator.pause()
    driver = DayTickDriver(coordinator)

    async def run() -> None:
        driver.start()
        await asyncio.sleep(0.1)
        await driver.stop()

    asyncio.run(run())

    assert coordinator.state.current_day == 0


def test_stop_does_not_wait_for_the_next_tick(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    coordinator = make_coordinator(configuration, dataset)
    coordinator.set_tick_interval(60_000)
    driver = DayTickDriver(coordinator)

    async def run() -> None:
        driver.start()
        await asyncio.sleep(0)
        await asyncio.wait_for(driver.stop(), timeout=1)

    asyncio.run(run())

    assert coordinator.state.current_day == 0


def test_driver_cannot_start_twice(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    driver = DayTickDriver(make_coordinator(configuration, dataset))

    async def run() -> None:
        driver.start()
        try:
            with pytest.raises(RuntimeError, match="already running"):
                driver.start()
        finally:
            await driver.stop()

    asyncio.run(run())


def test_challenge_clock_expires_the_deadline(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    times = [datetime(2026, 1, 1, tzinfo=UTC)]
    coordinator = make_coordinator(configuration, dataset, clock=lambda: times[0])
    coordinator.unlock_country("AA")
    times[0] += timedelta(minutes=10)
    driver = ChallengeClockDriver(coordinator, check_interval_seconds=0.01)

    async def run() -> None:
        driver.start()
        await asyncio.sleep(0.1)
        await driver.stop()

    asyncio.run(run())

    assert coordinator.challenge_status() is ChallengeStatus.EXPIRED


def test_challenge_clock_rejects_non_positive_interval(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    with pytest.raises(ValueError, match="positive"):
        ChallengeClockDriver(
            make_coordinator(configuration, dataset), check_interval_seconds=0
        )


class FlakyCoordinator(GameCoordinator):
    """Coordinator whose first simulated day blows up."""

    calls = 0

    def advance_day(self) -> DayResult | None:
        self.calls += 1
        if self.calls == 1:
            msg = "boom"
            raise RuntimeError(msg)
        return super().advance_day()


def test_failed_step_is_journalled_and_the_loop_keeps_ticking(
    configuration: EconomyConfiguration, dataset: GeoDataset
) -> None:
    coordinator = FlakyCoordinator(configuration, dataset=dataset)
    coordinator.set_tick_interval(1)
    driver = DayTickDriver(coordinator)
    still_running: list[bool] = []

    async def run() -> None:
        driver.start()
        await asyncio.sleep(0.2)
        still_running.append(driver.running)
        await driver.stop()

    asyncio.run(run())

    assert still_running == [True]
    assert coordinator.calls > 1
    assert coordinator.state.current_day >= 1
    failures = [
        event
        for event in coordinator.notifications()
        if event.event_type == "day_tick_failed"
    ]
    assert len(failures) == 1
    assert failures[0].message == "boom"
    assert failures[0].payload == {"error": "RuntimeError"}
