"""
Router package for the Plates API.

This package contains all API routers organized by domain:
- health: Liveness check
- cache: Cache status and forced refresh
- exercises: Exercises, sets, charts and per-exercise settings
- history: Workout days with labels
- body_weight: Body weight logs and goal
"""

from api.routers.health import router as health_router
from api.routers.cache import router as cache_router
from api.routers.exercises import router as exercises_router
from api.routers.history import router as history_router
from api.routers.body_weight import router as body_weight_router

__all__ = [
    "health_router",
    "cache_router",
    "exercises_router",
    "history_router",
    "body_weight_router",
]
