"""
Enumerations shared by the workout domain models.

Raw values match the strings stored in Supabase and shown to the user.
"""

from enum import Enum


class MuscleGroup(str, Enum):
    """Muscle group tag attached to an exercise."""

    ALL = "All"
    CHEST = "Chest"
    BACK = "Back"
    LEGS = "Legs"
    SHOULDERS = "Shoulders"
    ARMS = "Arms"
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    CORE = "Core"
    CARDIO = "Cardio"

    @property
    def display_name(self) -> str:
        return self.value


class ExerciseType(str, Enum):
    """How sets of an exercise are measured."""

    STRENGTH = "strength"
    CARDIO = "cardio"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()
