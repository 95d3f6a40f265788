"""Background drivers that advance a session on a wall-clock schedule."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from tycooner_backend.game_logic.orchestration import GameCoordinator

CHALLENGE_CHECK_INTERVAL_SECONDS = 1.0


class _PeriodicDriver:
    """Run a step repeatedly until stopped.

    The wait between steps is cut short by :meth:`stop`, so shutting down never
    waits for a full interval.
    """

    name: ClassVar[str] = "driver"

    def __init__(self, coordinator: GameCoordinator) -> None:
        self._coordinator = coordinator
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Schedule the driver loop on the running event loop."""
        if self.running:
            msg = f"{type(self).__name__} is already running."
            raise RuntimeError(msg)
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        return self._task

    async def stop(self) -> None:
        """Signal the loop to finish and wait for it."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await self._task
        self._task = None
        self._stop_event = None

    async def run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval())
            except TimeoutError:
                try:
                    self.step()
                except Exception as exc:  # noqa: BLE001
                    self._coordinator.record_failure(self.name, exc)

    def interval(self) -> float:
        raise NotImplementedError

    def step(self) -> None:
        raise NotImplementedError


class DayTickDriver(_PeriodicDriver):
    """Simulate one day per tick interval while the session is running.

    The interval is read from the state before every wait, so a speed change
    applies from the next tick on.
    """

    name = "day_tick"

    def interval(self) -> float:
        return self._coordinator.state.tick_interval_ms / 1000

    def step(self) -> None:
        self._coordinator.advance_day()


class ChallengeClockDriver(_PeriodicDriver):
    """Check the challenge deadline once a second."""

    name = "challenge_clock"

    def __init__(
        self,
        coordinator: GameCoordinator,
        *,
        check_interval_seconds: float = CHALLENGE_CHECK_INTERVAL_SECONDS,
    ) -> None:
        if check_interval_seconds <= 0:
            msg = "Check interval must be positive."
            raise ValueError(msg)
        super().__init__(coordinator)
        self._check_interval = check_interval_seconds

    def interval(self) -> float:
        return self._check_interval

    def step(self) -> None:
        self._coordinator.check_challenge()


__all__ = [
    "CHALLENGE_CHECK_INTERVAL_SECONDS",
    "ChallengeClockDriver",
    "DayTickDriver",
]
