"""Factory for constructing the FastAPI application."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tycooner_backend.api.routers import game_router
from tycooner_backend.game_logic.drivers import ChallengeClockDriver, DayTickDriver
from tycooner_backend.game_logic.orchestration import GameCoordinator
from tycooner_backend.settings import BackendSettings, get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


def create_api(
    coordinator: GameCoordinator | None = None,
    backend_settings: BackendSettings | None = None,
) -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    config = backend_settings or get_settings()
    session = coordinator or GameCoordinator(
        notification_limit=config.notification_limit
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            if config.run_drivers:
                for driver in (DayTickDriver(session), ChallengeClockDriver(session)):
                    driver.start()
                    stack.push_async_callback(driver.stop)
            yield

    app = FastAPI(title="Tycooner API", lifespan=lifespan)
    app.state.coordinator = session
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(game_router)
    return app


__all__ = ["create_api"]
