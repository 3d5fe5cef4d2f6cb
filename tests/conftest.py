"""
Shared fixtures for the Plates test suite.

Provides a fake remote, a controllable clock and a WorkoutDataStore wired to
both, so unit and integration tests never touch Supabase.
"""
import pytest

from backend.core.workout_data_store import WorkoutDataStore
from tests.fakes import FakeClock, FakeWorkoutRemote


@pytest.fixture
def fake_remote() -> FakeWorkoutRemote:
    """A fresh, empty FakeWorkoutRemote."""
    return FakeWorkoutRemote()


@pytest.fixture
def clock() -> FakeClock:
    """A clock that only moves when the test calls advance()."""
    return FakeClock()


@pytest.fixture
def store(fake_remote: FakeWorkoutRemote, clock: FakeClock) -> WorkoutDataStore:
    """A WorkoutDataStore over the fake remote with a 30 second TTL."""
    return WorkoutDataStore(fake_remote, stale_threshold=30.0, clock=clock)
