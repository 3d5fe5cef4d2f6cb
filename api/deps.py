"""
FastAPI Dependency Providers for the Plates API.

The workout data store is created once per process (in the app lifespan, see
backend.main) and shared by every request, so all endpoints read and write
the same cache.

Usage in routers:
    from api.deps import get_workout_store
    from backend.core.workout_data_store import WorkoutDataStore

    @router.get("/exercises")
    async def list_exercises(store: WorkoutDataStore = Depends(get_workout_store)):
        await store.refresh_if_stale()
        return store.exercises

Testing:
    # Pass a store built on a fake remote
    app = create_app(settings=test_settings, store=WorkoutDataStore(FakeWorkoutRemote()))

    # Or override the dependency
    app.dependency_overrides[get_workout_store] = lambda: store
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request
from supabase import AsyncClient, acreate_client

from application.exceptions import NotAuthenticatedError, RemoteOperationError
from backend.core.workout_data_store import WorkoutDataStore
from backend.settings import Settings, get_settings as _get_settings
from infrastructure.db.workout_remote import SupabaseWorkoutRemote

logger = logging.getLogger(__name__)


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.
    """
    return _get_settings()


# =============================================================================
# Supabase Client / Store Construction
# =============================================================================


async def create_supabase_client(settings: Settings) -> Optional[AsyncClient]:
    """
    Create an async Supabase client and sign in if credentials are configured.

    Returns None if the project URL or key is missing. A failed sign-in is
    logged and the client is returned without a session; user-scoped reads
    then come back empty.
    """
    if not settings.supabase_configured:
        logger.warning("Supabase credentials not configured. Workout data will be unavailable.")
        return None

    client = await acreate_client(settings.supabase_url, settings.supabase_anon_key)

    if settings.has_user_credentials:
        try:
            await client.auth.sign_in_with_password({
                "email": settings.supabase_user_email,
                "password": settings.supabase_user_password,
            })
            logger.info(f"Signed in to Supabase as {settings.supabase_user_email}")
        except Exception as e:
            logger.error(f"Supabase sign-in failed: {e}")

    return client


async def create_workout_store(settings: Settings) -> Optional[WorkoutDataStore]:
    """Build the process-wide workout data store, or None without Supabase."""
    client = await create_supabase_client(settings)
    if client is None:
        return None
    return WorkoutDataStore(
        SupabaseWorkoutRemote(client),
        stale_threshold=settings.cache_stale_seconds,
    )


# =============================================================================
# Store Provider
# =============================================================================


def get_workout_store(request: Request) -> WorkoutDataStore:
    """
    Get the shared WorkoutDataStore.

    Raises:
        HTTPException: 503 if the store could not be created
    """
    store = getattr(request.app.state, "workout_store", None)
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="Workout data not available. Supabase credentials not configured.",
        )
    return store


# =============================================================================
# Error Mapping
# =============================================================================


def remote_error_to_http(error: RemoteOperationError) -> HTTPException:
    """Translate a remote failure raised by a store mutation into an HTTP error."""
    if isinstance(error, NotAuthenticatedError):
        return HTTPException(status_code=401, detail=error.message)
    return HTTPException(status_code=502, detail=error.message)
