"""Tycooner backend package wiring and entrypoints."""

from tycooner_backend.settings import BackendSettings, get_settings, settings


def main() -> None:
    """Run the development server."""
    from tycooner_backend.main import run_dev  # noqa: PLC0415

    run_dev()


__all__ = [
    "BackendSettings",
    "get_settings",
    "main",
    "settings",
]
