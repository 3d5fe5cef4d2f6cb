"""
Domain models for the Plates workout tracker.

This package contains pure domain models that are independent of
infrastructure concerns (Supabase, HTTP, caching).

- Exercise: an exercise the user logs sets against
- WorkoutSet: one logged strength or cardio set
- SetPayload: the editable part of a set, validated for shape
- PersonalRecord: derived heaviest-weight-for-reps record
- BodyWeightLog / UserProfile: body weight tracking

Usage:
    >>> from domain.models import Exercise, WorkoutSet, SetPayload

    >>> payload = SetPayload(weight=185, reps=5)
    >>> payload.to_row()["weight"]
    185.0
"""

from domain.models.enums import ExerciseType, MuscleGroup
from domain.models.exercise import Exercise
from domain.models.workout_set import SetPayload, WorkoutSet, format_weight
from domain.models.personal_record import PersonalRecord
from domain.models.body_weight import BodyWeightLog, UserProfile

__all__ = [
    "ExerciseType",
    "MuscleGroup",
    "Exercise",
    "WorkoutSet",
    "SetPayload",
    "format_weight",
    "PersonalRecord",
    "BodyWeightLog",
    "UserProfile",
]
