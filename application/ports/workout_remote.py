"""
Workout Remote Interface (Port).

This module defines the abstract interface the workout data store uses to
reach the remote data service. Every method is a coroutine and may raise
RemoteOperationError with a readable message.
"""
from datetime import datetime
from typing import List, Optional, Protocol

from domain.models import (
    BodyWeightLog,
    Exercise,
    ExerciseType,
    MuscleGroup,
    SetPayload,
    UserProfile,
    WorkoutSet,
)


class WorkoutRemote(Protocol):
    """
    Abstract interface for the remote exercise/set/body-weight service.

    User-scoped reads return empty results when nobody is signed in.
    Mutations that need a user raise NotAuthenticatedError instead.
    """

    # -------------------------------------------------------------------------
    # Exercises
    # -------------------------------------------------------------------------

    async def fetch_exercises(self) -> List[Exercise]:
        """
        Get the exercises visible to the current user.

        Returns:
            Base exercises plus the user's linked exercises, sorted by name
        """
        ...

    async def fetch_all_exercises(self) -> List[Exercise]:
        """Get the whole exercise catalogue (used for add-exercise suggestions)."""
        ...

    async def add_exercise(
        self,
        name: str,
        muscle_group: MuscleGroup,
        exercise_type: ExerciseType,
        default_pr_reps: int,
        uses_body_weight: bool,
    ) -> Exercise:
        """
        Find or create an exercise and link it to the current user.

        Idempotent on name + muscle group: adding the same exercise twice
        returns the existing record.

        Returns:
            The created or existing exercise
        """
        ...

    async def update_pinned_note(self, exercise_id: str, note: Optional[str]) -> None:
        """Set or clear the pinned note of an exercise."""
        ...

    async def update_user_pr_reps(self, exercise_id: str, reps: Optional[int]) -> None:
        """Set or clear the user's PR rep-target override."""
        ...

    async def update_goal_weight(self, exercise_id: str, goal_weight: Optional[float]) -> None:
        """Set or clear the goal weight of an exercise."""
        ...

    async def update_goal_reps(self, exercise_id: str, goal_reps: Optional[int]) -> None:
        """Set or clear the goal rep count of an exercise."""
        ...

    # -------------------------------------------------------------------------
    # Sets
    # -------------------------------------------------------------------------

    async def fetch_all_sets(self) -> List[WorkoutSet]:
        """Get every set of the current user, newest first."""
        ...

    async def fetch_sets(self, exercise_id: str) -> List[WorkoutSet]:
        """Get the current user's sets for one exercise, newest first."""
        ...

    async def log_set(self, exercise_id: str, payload: SetPayload, date: datetime) -> None:
        """Create a set."""
        ...

    async def update_set(self, set_id: str, payload: SetPayload) -> None:
        """Replace a set's payload. Fields absent from the payload are cleared."""
        ...

    async def delete_set(self, set_id: str) -> None:
        """Delete a set."""
        ...

    # -------------------------------------------------------------------------
    # Body weight
    # -------------------------------------------------------------------------

    async def fetch_body_weight_logs(self) -> List[BodyWeightLog]:
        """Get the current user's body weight logs, newest first."""
        ...

    async def log_body_weight(
        self,
        weight: float,
        date: datetime,
        notes: Optional[str] = None,
    ) -> None:
        """Record a body weight and make it the profile's current weight."""
        ...

    async def delete_body_weight_log(self, log_id: str) -> None:
        """Delete a body weight log."""
        ...

    async def fetch_user_profile(self) -> Optional[UserProfile]:
        """Get the current user's profile, or None without a session."""
        ...

    async def update_profile_goal_weight(self, goal_weight: Optional[float]) -> None:
        """Set or clear the body weight goal."""
        ...
