"""Dependency providers for FastAPI routers."""

from __future__ import annotations

from fastapi import Request

from tycooner_backend.game_logic.orchestration import GameCoordinator


def get_coordinator(request: Request) -> GameCoordinator:
    """Return the session coordinator attached to the running application."""

    return request.app.state.coordinator


__all__ = ["get_coordinator"]
