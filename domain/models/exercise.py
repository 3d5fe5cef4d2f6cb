"""
Exercise entity as cached by the workout data store.

An exercise is either a shared base exercise or a user-created one linked to
the user through the ``user_exercises`` table.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from domain.models.enums import ExerciseType, MuscleGroup


class Exercise(BaseModel):
    """
    An exercise the user can log sets against.

    ``muscle_groups`` is never empty; the first element is the primary group
    used for filtering and workout labels. Rows that carry a single
    ``muscle_group`` column are accepted and wrapped into the list.

    Examples:
        >>> bench = Exercise(id="e1", name="Bench Press", muscle_groups=["Chest", "Triceps"])
        >>> bench.muscle_group
        <MuscleGroup.CHEST: 'Chest'>

        >>> Exercise(id="e2", name="Squat", muscle_group="Legs").muscle_groups
        [<MuscleGroup.LEGS: 'Legs'>]
    """

    id: str = Field(..., min_length=1, description="Opaque exercise identifier")
    name: str = Field(..., min_length=1, description="Display name")
    muscle_groups: List[MuscleGroup] = Field(
        ..., min_length=1, description="Muscle group tags, primary first"
    )
    exercise_type: ExerciseType = Field(default=ExerciseType.STRENGTH)
    default_pr_reps: int = Field(
        default=1, ge=1, description="Rep target used for the headline PR"
    )
    is_base: bool = Field(default=False, description="Shared catalogue exercise")
    uses_body_weight: bool = Field(
        default=False, description="Weight is added on top of body weight (e.g. pull-ups)"
    )
    pinned_note: Optional[str] = None
    goal_weight: Optional[float] = Field(default=None, ge=0)
    goal_reps: Optional[int] = Field(default=None, ge=1)
    user_pr_reps: Optional[int] = Field(
        default=None, ge=1, description="Per-user override of default_pr_reps"
    )
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_single_muscle_group(cls, data: Any) -> Any:
        if isinstance(data, dict) and "muscle_groups" not in data and "muscle_group" in data:
            data = dict(data)
            group = data.pop("muscle_group")
            data["muscle_groups"] = group if isinstance(group, list) else [group]
        return data

    @property
    def muscle_group(self) -> MuscleGroup:
        """Primary muscle group."""
        return self.muscle_groups[0]

    @property
    def effective_pr_reps(self) -> int:
        """Rep target for the headline PR, honouring the user's override."""
        return self.user_pr_reps if self.user_pr_reps is not None else self.default_pr_reps

    @property
    def is_cardio(self) -> bool:
        return self.exercise_type == ExerciseType.CARDIO
