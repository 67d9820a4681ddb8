"""Foodprint command line interface."""

from foodprint.cli.main import app, main

__all__ = ["app", "main"]
