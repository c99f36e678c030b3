"""API interface for timemaster.

This module exports the FastAPI router and app factory.
"""

from timemaster.interfaces.api.routes import create_app, router

__all__ = ["router", "create_app"]
