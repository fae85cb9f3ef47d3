"""Command-line interface."""

from prestowatch.cli.app import app, main

__all__ = ["app", "main"]
