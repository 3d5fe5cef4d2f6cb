"""
History router.

Returns the workout history: every cached set grouped by local calendar day,
newest first, with a label derived from the muscle groups trained that day
("Push", "Pull", "Legs", ...).
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.deps import get_workout_store
from backend.core.workout_data_store import WorkoutDataStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/history",
    tags=["History"],
)


class HistorySetResponse(BaseModel):
    """A set within a workout day."""
    id: str
    exercise_id: str
    exercise_name: Optional[str] = None
    date: datetime
    display_text: str
    notes: Optional[str] = None


class WorkoutDayResponse(BaseModel):
    """One workout day."""
    date: date
    label: str
    exercise_count: int
    sets: List[HistorySetResponse]


class HistoryResponse(BaseModel):
    days: List[WorkoutDayResponse]
    total: int


@router.get("", response_model=HistoryResponse)
async def get_history(
    limit: int = Query(30, ge=1, le=365, description="Maximum days to return"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> HistoryResponse:
    """Get labelled workout days, newest first."""
    await store.refresh_if_stale()
    exercises = store.exercise_dict

    days = []
    for day in store.get_workout_days()[:limit]:
        sets = []
        for workout_set in day.sets:
            exercise = exercises.get(workout_set.exercise_id)
            sets.append(HistorySetResponse(
                id=workout_set.id,
                exercise_id=workout_set.exercise_id,
                exercise_name=exercise.name if exercise else None,
                date=workout_set.date,
                display_text=workout_set.display_text(
                    exercise.uses_body_weight if exercise else False
                ),
                notes=workout_set.notes,
            ))
        days.append(WorkoutDayResponse(
            date=day.date,
            label=day.label,
            exercise_count=len({s.exercise_id for s in day.sets}),
            sets=sets,
        ))

    return HistoryResponse(days=days, total=len(days))
