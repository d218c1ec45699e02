"""HTTP API."""

from vira.api.app import create_app

__all__ = ["create_app"]
