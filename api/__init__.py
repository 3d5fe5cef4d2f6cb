"""
API package for the Plates API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_workout_store,
    create_supabase_client,
    create_workout_store,
)

__all__ = [
    # Settings
    "get_settings",
    # Store
    "get_workout_store",
    "create_supabase_client",
    "create_workout_store",
]
