"""
Cache router.

Exposes the workout data store's cache state and a pull-to-refresh endpoint
that bypasses the staleness threshold.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_workout_store
from backend.core.workout_data_store import WorkoutDataStore

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Cache"],
)


class CacheStatusResponse(BaseModel):
    """Snapshot bookkeeping of the workout data store."""
    last_fetched_at: Optional[datetime] = None
    is_stale: bool
    fetch_in_flight: bool
    is_loading: bool
    error_message: Optional[str] = None
    exercise_count: int
    set_count: int


def _status(store: WorkoutDataStore) -> CacheStatusResponse:
    return CacheStatusResponse(
        last_fetched_at=store.last_fetched_at,
        is_stale=store.is_stale,
        fetch_in_flight=store.fetch_in_flight,
        is_loading=store.is_loading,
        error_message=store.error_message,
        exercise_count=len(store.exercises),
        set_count=len(store.all_sets),
    )


@router.get("/cache/status", response_model=CacheStatusResponse)
async def get_cache_status(
    store: WorkoutDataStore = Depends(get_workout_store),
) -> CacheStatusResponse:
    """Report when the snapshot was loaded and whether the last fetch failed."""
    return _status(store)


@router.post("/refresh", response_model=CacheStatusResponse)
async def refresh(
    store: WorkoutDataStore = Depends(get_workout_store),
) -> CacheStatusResponse:
    """
    Reload exercises, sets and body weight data regardless of cache age.

    A failed reload keeps the previous data; the reason is reported in
    error_message.
    """
    logger.info("Manual refresh requested")
    store.invalidate()
    await store.fetch_all(force=True)
    await store.fetch_body_weight(force=True)
    return _status(store)
