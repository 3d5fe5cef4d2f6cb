"""
Workout set entity and the payload used to create or edit one.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


def format_weight(weight: float, uses_body_weight: bool) -> str:
    """
    Render a weight the way set lists show it.

    Body-weight exercises show ``BW`` for zero added weight and
    ``BW + N lbs`` otherwise.
    """
    if not uses_body_weight:
        return f"{int(weight)} lbs"
    if weight > 0:
        return f"BW + {int(weight)} lbs"
    return "BW"


class SetPayload(BaseModel):
    """
    Mutable fields of a set, exactly one shape of which must be filled in.

    Strength sets carry ``weight`` and ``reps``; cardio sets carry
    ``distance`` (miles) and ``duration`` (minutes).

    Examples:
        >>> SetPayload(weight=185, reps=5).is_strength
        True

        >>> SetPayload(distance=3.1, duration=28).is_cardio
        True
    """

    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    distance: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @property
    def is_strength(self) -> bool:
        return self.weight is not None and self.reps is not None

    @property
    def is_cardio(self) -> bool:
        return self.distance is not None and self.duration is not None

    @model_validator(mode="after")
    def validate_shape(self) -> "SetPayload":
        """A payload is either strength or cardio, never both or neither."""
        if self.is_strength and self.is_cardio:
            raise ValueError("A set cannot carry both strength and cardio values")
        if not self.is_strength and not self.is_cardio:
            raise ValueError(
                "A set needs weight and reps (strength) or distance and duration (cardio)"
            )
        return self

    def to_row(self) -> dict:
        """Column values for the ``sets`` table, nulls included."""
        return {
            "weight": self.weight,
            "reps": self.reps,
            "distance": self.distance,
            "duration": self.duration,
            "notes": self.notes or None,
        }


class WorkoutSet(BaseModel):
    """A single logged set, as stored in the ``sets`` table."""

    id: str = Field(..., min_length=1)
    exercise_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None

    # Strength
    weight: Optional[float] = None
    reps: Optional[int] = None

    # Cardio
    distance: Optional[float] = None
    duration: Optional[int] = None

    date: datetime
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_strength(self) -> bool:
        return self.weight is not None and self.reps is not None

    @property
    def is_cardio(self) -> bool:
        return self.distance is not None and self.duration is not None

    def display_text(self, uses_body_weight: bool = False) -> str:
        """
        Short human-readable description of the set.

        Examples:
            >>> from datetime import datetime
            >>> WorkoutSet(id="s1", exercise_id="e1", weight=25, reps=8,
            ...            date=datetime(2026, 1, 5)).display_text(uses_body_weight=True)
            'BW + 25 lbs × 8'
        """
        if self.is_strength:
            return f"{format_weight(self.weight, uses_body_weight)} × {self.reps}"
        if self.is_cardio:
            return f"{self.distance:.2f} mi • {self.duration} min"
        return "Invalid set"
