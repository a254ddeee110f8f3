"""HTTP service exposing the greeting and actuator endpoints."""

from .app import create_app

__all__ = ["create_app"]
