"""
Application factory for FastAPI.

This module provides a factory function for creating FastAPI application instances.
The factory pattern allows for:
- Easy testing with custom settings and a store built on a fake remote
- One WorkoutDataStore per process, created in the lifespan handler
- Clear separation of app creation from route definitions

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    # Default app (uses get_settings())
    app = create_app()

    # Test app with custom settings and an injected store
    test_settings = Settings(environment="test", _env_file=None)
    test_app = create_app(settings=test_settings, store=store)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI

from backend.core.workout_data_store import WorkoutDataStore
from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[WorkoutDataStore] = None,
) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.
        store: Optional pre-built store. If not provided, the lifespan handler
               builds one backed by Supabase.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _configure_logging(settings)

    # Initialize Sentry for error tracking
    _init_sentry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.workout_store is None:
            from api.deps import create_workout_store

            app.state.workout_store = await create_workout_store(settings)
        yield

    app = FastAPI(
        title="Plates API",
        description="Workout logging, cache and progress views",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.workout_store = store

    _include_routers(app)

    logger.info(
        f"Plates API created (environment={settings.environment}, "
        f"cache_stale_seconds={settings.cache_stale_seconds})"
    )
    return app


def _configure_logging(settings: Settings) -> None:
    """Set the root log level and a plain format if nothing is configured yet."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(settings.log_level)


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
        )
        logger.info("Sentry initialized for plates-api")


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import (
        health_router,
        cache_router,
        exercises_router,
        history_router,
        body_weight_router,
    )

    # Health router (no prefix - /health at root)
    app.include_router(health_router)
    app.include_router(cache_router)
    app.include_router(exercises_router)
    app.include_router(history_router)
    app.include_router(body_weight_router)


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
