"""
Body weight router.

This router provides endpoints for:
- Body weight logs with the chart series and start/current/goal summary
- Logging and deleting a measurement
- Setting the body weight goal
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from api.deps import get_workout_store, remote_error_to_http
from application.exceptions import RemoteOperationError
from backend.core.workout_data_store import WorkoutDataStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/body-weight",
    tags=["Body Weight"],
)


# =============================================================================
# Request / Response Models
# =============================================================================


class BodyWeightLogResponse(BaseModel):
    id: str
    weight: float
    date: datetime
    notes: Optional[str] = None


class BodyWeightPoint(BaseModel):
    date: date
    weight: float


class BodyWeightResponse(BaseModel):
    """Logs newest first, chart oldest first."""
    logs: List[BodyWeightLogResponse]
    chart: List[BodyWeightPoint]
    starting_weight: Optional[float] = None
    current_weight: Optional[float] = None
    goal_weight: Optional[float] = None
    total_change: Optional[float] = None
    remaining_to_goal: Optional[float] = None


class LogBodyWeightRequest(BaseModel):
    weight: float = Field(..., gt=0, le=1500)
    date: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class BodyWeightGoalRequest(BaseModel):
    goal_weight: Optional[float] = Field(default=None, gt=0, le=1500)


def _body_weight_response(store: WorkoutDataStore) -> BodyWeightResponse:
    summary = store.get_body_weight_summary()
    return BodyWeightResponse(
        logs=[
            BodyWeightLogResponse(id=log.id, weight=log.weight, date=log.date, notes=log.notes)
            for log in store.body_weight_logs
        ],
        chart=[
            BodyWeightPoint(date=p.date, weight=p.weight)
            for p in store.get_body_weight_chart_data()
        ],
        starting_weight=summary.starting_weight,
        current_weight=summary.current_weight,
        goal_weight=summary.goal_weight,
        total_change=summary.total_change,
        remaining_to_goal=summary.remaining_to_goal,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=BodyWeightResponse)
async def get_body_weight(
    store: WorkoutDataStore = Depends(get_workout_store),
) -> BodyWeightResponse:
    """Get body weight logs, chart and summary (cached for the stale threshold)."""
    await store.fetch_body_weight()
    return _body_weight_response(store)


@router.post("", response_model=BodyWeightResponse, status_code=201)
async def log_body_weight(
    request: LogBodyWeightRequest,
    store: WorkoutDataStore = Depends(get_workout_store),
) -> BodyWeightResponse:
    """Log a body weight measurement; it also becomes the profile's current weight."""
    notes = request.notes.strip() if request.notes else None
    try:
        await store.log_body_weight(request.weight, date=request.date, notes=notes or None)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _body_weight_response(store)


@router.put("/goal", response_model=BodyWeightResponse)
async def update_body_weight_goal(
    request: BodyWeightGoalRequest,
    store: WorkoutDataStore = Depends(get_workout_store),
) -> BodyWeightResponse:
    try:
        await store.update_profile_goal_weight(request.goal_weight)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _body_weight_response(store)


@router.delete("/{log_id}", response_model=BodyWeightResponse)
async def delete_body_weight_log(
    log_id: str = Path(..., description="Body weight log ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> BodyWeightResponse:
    try:
        await store.delete_body_weight_log(log_id)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _body_weight_response(store)
