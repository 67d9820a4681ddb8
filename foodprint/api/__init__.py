"""HTTP adapter for the emissions engine."""

from foodprint.api.routes import create_app, router

__all__ = ["create_app", "router"]
