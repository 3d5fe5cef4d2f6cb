"""
Exercises router.

This router provides endpoints for:
- Listing and filtering the user's exercises, and suggesting catalogue names
- Adding (find-or-create) an exercise
- Exercise detail: last set, last session, personal records, cardio pace
- Chart series for weight or body-weight rep progression
- Logging, editing and deleting sets
- Pinned note, PR rep target and goal edits

Reads are served from the shared WorkoutDataStore cache, reloading it first
when the snapshot is stale. Mutations go through the store so only the
affected slice is refreshed.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, Field, field_validator, model_validator

from api.deps import get_workout_store, remote_error_to_http
from application.exceptions import RemoteOperationError
from backend.core import workout_calculations as calc
from backend.core.workout_data_store import WorkoutDataStore
from domain.models import (
    Exercise,
    ExerciseType,
    MuscleGroup,
    PersonalRecord,
    SetPayload,
    WorkoutSet,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/exercises",
    tags=["Exercises"],
)


# =============================================================================
# Response Models
# =============================================================================


class ExerciseResponse(BaseModel):
    """An exercise as shown in the exercise list."""
    id: str
    name: str
    muscle_group: MuscleGroup
    muscle_groups: List[MuscleGroup]
    exercise_type: ExerciseType
    is_base: bool
    uses_body_weight: bool
    default_pr_reps: int
    user_pr_reps: Optional[int] = None
    effective_pr_reps: int
    pinned_note: Optional[str] = None
    goal_weight: Optional[float] = None
    goal_reps: Optional[int] = None

    @classmethod
    def from_exercise(cls, exercise: Exercise) -> "ExerciseResponse":
        return cls(
            id=exercise.id,
            name=exercise.name,
            muscle_group=exercise.muscle_group,
            muscle_groups=exercise.muscle_groups,
            exercise_type=exercise.exercise_type,
            is_base=exercise.is_base,
            uses_body_weight=exercise.uses_body_weight,
            default_pr_reps=exercise.default_pr_reps,
            user_pr_reps=exercise.user_pr_reps,
            effective_pr_reps=exercise.effective_pr_reps,
            pinned_note=exercise.pinned_note,
            goal_weight=exercise.goal_weight,
            goal_reps=exercise.goal_reps,
        )


class ExerciseListResponse(BaseModel):
    """Response model for the exercise list."""
    exercises: List[ExerciseResponse]
    total: int


class SetResponse(BaseModel):
    """A single logged set."""
    id: str
    exercise_id: str
    weight: Optional[float] = None
    reps: Optional[int] = None
    distance: Optional[float] = None
    duration: Optional[int] = None
    date: datetime
    notes: Optional[str] = None
    display_text: str

    @classmethod
    def from_set(cls, workout_set: WorkoutSet, uses_body_weight: bool = False) -> "SetResponse":
        return cls(
            id=workout_set.id,
            exercise_id=workout_set.exercise_id,
            weight=workout_set.weight,
            reps=workout_set.reps,
            distance=workout_set.distance,
            duration=workout_set.duration,
            date=workout_set.date,
            notes=workout_set.notes,
            display_text=workout_set.display_text(uses_body_weight),
        )


class SetListResponse(BaseModel):
    """Sets of one exercise, newest first."""
    exercise_id: str
    sets: List[SetResponse]
    total: int


class PersonalRecordResponse(BaseModel):
    """Heaviest weight for at least `reps` reps."""
    reps: int
    weight: float
    date: datetime
    label: str
    display_text: str

    @classmethod
    def from_record(cls, record: PersonalRecord) -> "PersonalRecordResponse":
        return cls(
            reps=record.reps,
            weight=record.weight,
            date=record.date,
            label=record.label,
            display_text=record.display_text,
        )


class PaceResponse(BaseModel):
    """Fastest cardio set."""
    pace: float
    pace_display: str
    distance: float
    duration: int
    date: datetime


class ExerciseDetailResponse(BaseModel):
    """Everything the exercise detail view shows."""
    exercise: ExerciseResponse
    set_count: int
    last_set: Optional[SetResponse] = None
    last_session: Optional[SetResponse] = None
    current_pr: Optional[PersonalRecordResponse] = None
    personal_records: List[PersonalRecordResponse] = Field(default_factory=list)
    best_distance: Optional[float] = None
    best_pace: Optional[PaceResponse] = None
    average_pace: Optional[str] = None


class ChartPoint(BaseModel):
    """A single chart point."""
    date: date
    value: float


class ChartResponse(BaseModel):
    """Progression series, oldest first."""
    exercise_id: str
    metric: str  # "weight" or "reps"
    rep_filter: Optional[int] = None
    points: List[ChartPoint]


# =============================================================================
# Request Models
# =============================================================================


class AddExerciseRequest(BaseModel):
    """
    Request body for adding an exercise.

    An optional first set can be logged with the new exercise: ``pr_weight``
    and ``pr_reps`` for strength, ``pr_distance`` and ``pr_duration`` for
    cardio. Each pair is all or nothing.

    Cardio exercises are always filed under Cardio with a 1-rep PR target
    and no body-weight scoring; ``muscle_group`` is then optional.
    """
    name: str = Field(..., min_length=1, max_length=100)
    muscle_group: Optional[MuscleGroup] = None
    exercise_type: ExerciseType = ExerciseType.STRENGTH
    default_pr_reps: int = Field(default=1, ge=1, le=50)
    uses_body_weight: bool = False

    # Initial set
    pr_weight: Optional[float] = Field(default=None, ge=0)
    pr_reps: Optional[int] = Field(default=None, ge=1)
    pr_distance: Optional[float] = Field(default=None, gt=0)
    pr_duration: Optional[int] = Field(default=None, gt=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Exercise name cannot be blank")
        return v

    @field_validator("muscle_group")
    @classmethod
    def reject_all(cls, v: Optional[MuscleGroup]) -> Optional[MuscleGroup]:
        if v == MuscleGroup.ALL:
            raise ValueError("'All' is a filter, not a muscle group")
        return v

    @model_validator(mode="after")
    def normalize_for_type(self) -> "AddExerciseRequest":
        strength_fields = (self.pr_weight, self.pr_reps)
        cardio_fields = (self.pr_distance, self.pr_duration)

        if self.exercise_type == ExerciseType.CARDIO:
            if any(v is not None for v in strength_fields):
                raise ValueError("Cardio exercises take pr_distance and pr_duration, not pr_weight or pr_reps")
            if (self.pr_distance is None) != (self.pr_duration is None):
                raise ValueError("pr_distance and pr_duration must be given together")
            self.muscle_group = MuscleGroup.CARDIO
            self.default_pr_reps = 1
            self.uses_body_weight = False
            return self

        if any(v is not None for v in cardio_fields):
            raise ValueError("Strength exercises take pr_weight and pr_reps, not pr_distance or pr_duration")
        if (self.pr_weight is None) != (self.pr_reps is None):
            raise ValueError("pr_weight and pr_reps must be given together")
        if self.muscle_group is None:
            raise ValueError("muscle_group is required for strength exercises")
        return self

    def initial_set(self) -> Optional[SetPayload]:
        """The first set to log with the exercise, if one was given."""
        if self.pr_weight is not None and self.pr_reps is not None:
            return SetPayload(weight=self.pr_weight, reps=self.pr_reps)
        if self.pr_distance is not None and self.pr_duration is not None:
            return SetPayload(distance=self.pr_distance, duration=self.pr_duration)
        return None


class LogSetRequest(SetPayload):
    """Request body for logging a set. Date defaults to now."""
    date: Optional[datetime] = None

    def to_payload(self) -> SetPayload:
        return SetPayload(**self.model_dump(exclude={"date"}))


class PinnedNoteRequest(BaseModel):
    note: Optional[str] = Field(default=None, max_length=500)


class PrRepsRequest(BaseModel):
    reps: Optional[int] = Field(default=None, ge=1)


class GoalWeightRequest(BaseModel):
    goal_weight: Optional[float] = Field(default=None, ge=0)


class GoalRepsRequest(BaseModel):
    goal_reps: Optional[int] = Field(default=None, ge=1)


# =============================================================================
# Helpers
# =============================================================================


async def _load_exercise(store: WorkoutDataStore, exercise_id: str) -> Exercise:
    """Return the cached exercise, reloading a stale snapshot first."""
    await store.refresh_if_stale()
    exercise = store.get_exercise(exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail=f"Exercise '{exercise_id}' not found")
    return exercise


def _set_list(store: WorkoutDataStore, exercise: Exercise) -> SetListResponse:
    sets = store.get_sets(exercise.id)
    return SetListResponse(
        exercise_id=exercise.id,
        sets=[SetResponse.from_set(s, exercise.uses_body_weight) for s in sets],
        total=len(sets),
    )


def _patched_exercise(store: WorkoutDataStore, exercise_id: str) -> ExerciseResponse:
    exercise = store.get_exercise(exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail=f"Exercise '{exercise_id}' not found")
    return ExerciseResponse.from_exercise(exercise)


# =============================================================================
# Exercise Endpoints
# =============================================================================


@router.get("", response_model=ExerciseListResponse)
async def list_exercises(
    muscle_group: Optional[MuscleGroup] = Query(None, description="Filter by muscle group tag"),
    search: str = Query("", max_length=100, description="Case-insensitive name filter"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseListResponse:
    """
    List the user's exercises.

    Served from cache; the snapshot is reloaded first if it is stale.
    """
    await store.refresh_if_stale()
    exercises = store.filter_exercises(muscle_group=muscle_group, search_text=search)
    return ExerciseListResponse(
        exercises=[ExerciseResponse.from_exercise(e) for e in exercises],
        total=len(exercises),
    )


@router.get("/suggestions", response_model=ExerciseListResponse)
async def suggest_exercises(
    q: str = Query(..., description="Partial exercise name or muscle group"),
    limit: int = Query(8, ge=1, le=50),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseListResponse:
    """
    Suggest existing exercise names while the user types a new one.

    Queries shorter than two characters return no suggestions.
    """
    if not store.catalogue:
        await store.refresh_catalogue()
    suggestions = store.suggest_exercises(q, limit=limit)
    return ExerciseListResponse(
        exercises=[ExerciseResponse.from_exercise(e) for e in suggestions],
        total=len(suggestions),
    )


@router.post("", response_model=ExerciseResponse, status_code=201)
async def add_exercise(
    request: AddExerciseRequest,
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseResponse:
    """
    Add an exercise to the user's list.

    An exercise with the same name and muscle group is reused rather than
    duplicated. When the request carries an initial set it is logged
    against the exercise right after it is added.
    """
    initial_set = request.initial_set()
    try:
        exercise = await store.add_exercise(
            name=request.name,
            muscle_group=request.muscle_group,
            exercise_type=request.exercise_type,
            default_pr_reps=request.default_pr_reps,
            uses_body_weight=request.uses_body_weight,
        )
        if initial_set is not None:
            await store.log_set(exercise.id, initial_set)
            logger.info(f"Initial set logged for {exercise.name}")
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e

    cached = store.get_exercise(exercise.id)
    return ExerciseResponse.from_exercise(cached or exercise)


@router.get("/{exercise_id}", response_model=ExerciseDetailResponse)
async def get_exercise_detail(
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseDetailResponse:
    """
    Get the exercise detail view.

    Strength exercises report the last session's top set and personal
    records; cardio exercises report best distance and pace.
    """
    exercise = await _load_exercise(store, exercise_id)
    bw = exercise.uses_body_weight

    def as_set(workout_set: Optional[WorkoutSet]) -> Optional[SetResponse]:
        return SetResponse.from_set(workout_set, bw) if workout_set else None

    current_pr = store.get_current_pr(exercise_id, exercise.effective_pr_reps)
    best_pace = store.get_best_pace(exercise_id)
    average_pace = store.get_average_pace(exercise_id)

    return ExerciseDetailResponse(
        exercise=ExerciseResponse.from_exercise(exercise),
        set_count=len(store.get_sets(exercise_id)),
        last_set=as_set(store.get_last_set(exercise_id)),
        last_session=as_set(store.get_last_session(exercise_id)),
        current_pr=PersonalRecordResponse.from_record(current_pr) if current_pr else None,
        personal_records=[
            PersonalRecordResponse.from_record(r)
            for r in store.get_personal_records(exercise_id)
        ],
        best_distance=store.get_best_distance(exercise_id),
        best_pace=PaceResponse(
            pace=best_pace.pace,
            pace_display=calc.format_pace(best_pace.pace),
            distance=best_pace.distance,
            duration=best_pace.duration,
            date=best_pace.date,
        ) if best_pace else None,
        average_pace=calc.format_pace(average_pace) if average_pace is not None else None,
    )


@router.get("/{exercise_id}/chart", response_model=ChartResponse)
async def get_exercise_chart(
    exercise_id: str = Path(..., description="Exercise ID"),
    rep_filter: int = Query(1, ge=1, le=50, description="Minimum reps a set needs to count"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ChartResponse:
    """
    Get the progression chart for an exercise.

    Body-weight exercises logged without added weight chart reps per day;
    everything else charts the heaviest weight per day.
    """
    exercise = await _load_exercise(store, exercise_id)
    sets = store.get_sets(exercise_id)

    if exercise.uses_body_weight and not any((s.weight or 0) > 0 for s in sets):
        points = store.get_body_weight_exercise_chart_data(exercise_id)
        return ChartResponse(
            exercise_id=exercise_id,
            metric="reps",
            points=[ChartPoint(date=p.date, value=p.reps) for p in points],
        )

    points = store.get_chart_data(exercise_id, rep_filter)
    return ChartResponse(
        exercise_id=exercise_id,
        metric="weight",
        rep_filter=rep_filter,
        points=[ChartPoint(date=p.date, value=p.weight) for p in points],
    )


# =============================================================================
# Set Endpoints
# =============================================================================


@router.get("/{exercise_id}/sets", response_model=SetListResponse)
async def list_sets(
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> SetListResponse:
    """Get an exercise's sets, newest first."""
    exercise = await _load_exercise(store, exercise_id)
    return _set_list(store, exercise)


@router.post("/{exercise_id}/sets", response_model=SetListResponse, status_code=201)
async def log_set(
    request: LogSetRequest,
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> SetListResponse:
    """Log a set and return the exercise's refreshed sets."""
    exercise = await _load_exercise(store, exercise_id)
    try:
        await store.log_set(exercise_id, request.to_payload(), date=request.date)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _set_list(store, exercise)


@router.patch("/{exercise_id}/sets/{set_id}", response_model=SetListResponse)
async def update_set(
    payload: SetPayload,
    exercise_id: str = Path(..., description="Exercise ID"),
    set_id: str = Path(..., description="Set ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> SetListResponse:
    """
    Replace a set's values.

    The whole payload is written, so switching a set between strength and
    cardio clears the fields of the old shape.
    """
    exercise = await _load_exercise(store, exercise_id)
    try:
        await store.update_set(set_id, exercise_id, payload)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _set_list(store, exercise)


@router.delete("/{exercise_id}/sets/{set_id}", response_model=SetListResponse)
async def delete_set(
    exercise_id: str = Path(..., description="Exercise ID"),
    set_id: str = Path(..., description="Set ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> SetListResponse:
    """Delete a set and return the exercise's refreshed sets."""
    exercise = await _load_exercise(store, exercise_id)
    try:
        await store.delete_set(set_id, exercise_id)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _set_list(store, exercise)


# =============================================================================
# Exercise Field Endpoints
# =============================================================================


@router.put("/{exercise_id}/pinned-note", response_model=ExerciseResponse)
async def update_pinned_note(
    request: PinnedNoteRequest,
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseResponse:
    """Set or clear the note pinned to an exercise."""
    await _load_exercise(store, exercise_id)
    note = request.note.strip() if request.note else None
    try:
        await store.update_pinned_note(exercise_id, note or None)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _patched_exercise(store, exercise_id)


@router.put("/{exercise_id}/pr-reps", response_model=ExerciseResponse)
async def update_pr_reps(
    request: PrRepsRequest,
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseResponse:
    """Override the rep target of the headline PR (null restores the default)."""
    await _load_exercise(store, exercise_id)
    try:
        await store.update_user_pr_reps(exercise_id, request.reps)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _patched_exercise(store, exercise_id)


@router.put("/{exercise_id}/goal-weight", response_model=ExerciseResponse)
async def update_goal_weight(
    request: GoalWeightRequest,
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseResponse:
    await _load_exercise(store, exercise_id)
    try:
        await store.update_goal_weight(exercise_id, request.goal_weight)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _patched_exercise(store, exercise_id)


@router.put("/{exercise_id}/goal-reps", response_model=ExerciseResponse)
async def update_goal_reps(
    request: GoalRepsRequest,
    exercise_id: str = Path(..., description="Exercise ID"),
    store: WorkoutDataStore = Depends(get_workout_store),
) -> ExerciseResponse:
    await _load_exercise(store, exercise_id)
    try:
        await store.update_goal_reps(exercise_id, request.goal_reps)
    except RemoteOperationError as e:
        raise remote_error_to_http(e) from e
    return _patched_exercise(store, exercise_id)
