"""
Fake Implementations for Testing.

This package provides an in-memory fake implementation of the WorkoutRemote
interface, plus a controllable clock, for fast, isolated testing. No database
or network access required.

Features:
- The fake implements the same Protocol interface as the Supabase adapter
- Supports seeding with test data
- Supports reset() for test isolation
- Records call counts and can inject failures
- Factory function for a common test scenario

Usage:
    from tests.fakes import FakeWorkoutRemote, create_workout_remote

    # Direct instantiation
    remote = FakeWorkoutRemote()
    remote.seed_exercise("bench", "Bench Press", MuscleGroup.CHEST)

    # Factory function with pre-populated data
    remote = create_workout_remote(today=datetime(2026, 3, 10, 18, 0))
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from domain.models import ExerciseType, MuscleGroup
from tests.fakes.workout_remote import FakeWorkoutRemote


class FakeClock:
    """
    Callable clock whose time only moves when a test advances it.

    Usage:
        clock = FakeClock()
        store = WorkoutDataStore(remote, clock=clock)
        clock.advance(31)
    """

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# =============================================================================
# Factory Functions
# =============================================================================


def create_workout_remote(
    *,
    user_id: str = "test_user",
    today: Optional[datetime] = None,
) -> FakeWorkoutRemote:
    """
    Create a FakeWorkoutRemote with a small training history.

    Seeds a bench press, a squat, pull-ups (body weight) and a run, with
    sets spread over the three days before ``today``.

    Args:
        user_id: Owner of the seeded sets
        today: Reference time (defaults to now, UTC)

    Returns:
        Pre-populated FakeWorkoutRemote
    """
    today = today or datetime.now(timezone.utc)
    day = timedelta(days=1)

    remote = FakeWorkoutRemote(user_id=user_id)
    remote.seed_exercise("bench", "Bench Press", MuscleGroup.CHEST, default_pr_reps=5)
    remote.seed_exercise("squat", "Squat", MuscleGroup.LEGS)
    remote.seed_exercise(
        "pullup", "Pull-Up", MuscleGroup.BACK, uses_body_weight=True,
    )
    remote.seed_exercise(
        "run", "Run", MuscleGroup.CARDIO, exercise_type=ExerciseType.CARDIO.value,
    )

    remote.seed_set("b1", "bench", today - 3 * day, weight=185, reps=5)
    remote.seed_set("b2", "bench", today - 3 * day, weight=195, reps=3)
    remote.seed_set("b3", "bench", today - day, weight=190, reps=5)
    remote.seed_set("s1", "squat", today - 2 * day, weight=225, reps=8)
    remote.seed_set("p1", "pullup", today - 2 * day, weight=0, reps=12)
    remote.seed_set("r1", "run", today - day, distance=3.1, duration=28)
    return remote


__all__ = [
    "FakeWorkoutRemote",
    "FakeClock",
    "create_workout_remote",
]
