"""ASGI application and server launchers for the Tycooner backend."""

from __future__ import annotations

from pathlib import Path

import uvicorn

from tycooner_backend.api import create_api
from tycooner_backend.settings import get_settings

_PACKAGE_DIR = Path(__file__).resolve().parent

app = create_api()


def _serve(*, reload: bool) -> None:
    config = get_settings()
    uvicorn.run(
        "tycooner_backend.main:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level,
        reload=reload,
        reload_dirs=[str(_PACKAGE_DIR)] if reload else None,
    )


def run_dev() -> None:
    """Serve with auto-reload on source changes; the session restarts on reload."""
    _serve(reload=True)


def run_prod() -> None:
    """Serve the single long-lived session without reloading."""
    _serve(reload=False)


__all__ = ["app", "run_dev", "run_prod"]
