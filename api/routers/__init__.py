"""
Router package for the Progressive Overload API.

This package contains all API routers organized by domain:
- health: Health check endpoints
- progression: Targets, deloads, personal records and presets
"""

from api.routers.health import router as health_router
from api.routers.progression import router as progression_router

__all__ = [
    "health_router",
    "progression_router",
]
