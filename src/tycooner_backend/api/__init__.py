"""HTTP API exposing the game session to the browser client."""

from tycooner_backend.api.app import create_api

__all__ = ["create_api"]
