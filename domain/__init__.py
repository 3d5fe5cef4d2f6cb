"""
Domain layer for the Plates workout tracker.

This package contains pure domain models that are independent of
infrastructure concerns (database, API, external services).
"""

from domain.models import (
    BodyWeightLog,
    Exercise,
    ExerciseType,
    MuscleGroup,
    PersonalRecord,
    SetPayload,
    UserProfile,
    WorkoutSet,
)

__all__ = [
    "BodyWeightLog",
    "Exercise",
    "ExerciseType",
    "MuscleGroup",
    "PersonalRecord",
    "SetPayload",
    "UserProfile",
    "WorkoutSet",
]
