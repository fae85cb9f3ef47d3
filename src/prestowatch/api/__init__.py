"""HTTP surface: the health endpoint."""

from prestowatch.api.app import create_app

__all__ = ["create_app"]
