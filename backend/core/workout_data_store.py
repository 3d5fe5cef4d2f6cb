"""
Workout Data Store.

A single in-process cache of the user's exercises, sets and body weight data,
created once per application session and handed to every consumer.

Latency strategies:
1. One shared cache: data survives across screens and requests
2. Bulk fetch: exercises and all sets are loaded with two concurrent queries
3. Staleness threshold: a snapshot younger than the TTL (30s) is reused
4. Request deduplication: at most one snapshot fetch is in flight
5. Selective refresh: a mutation re-fetches only the slice it touched

Fetch-style methods never raise on remote failure; they record the failure
in ``error_message``. Mutation methods raise RemoteOperationError to the
caller. Cache state only changes after the remote call has succeeded.
Cached collections are exposed as tuples and only the store replaces them.

The ``last_fetched_at`` timestamp covers the whole snapshot. A selective
refresh updates one exercise without touching it, so a later
``fetch_all(force=False)`` may still reload everything once the snapshot is
stale.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

from application.exceptions import RemoteOperationError
from application.ports.workout_remote import WorkoutRemote
from backend.core import workout_calculations as calc
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

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STALE_SECONDS = 30.0
SUGGESTION_MIN_QUERY_LENGTH = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(sets: List[WorkoutSet]) -> Tuple[WorkoutSet, ...]:
    return tuple(sorted(sets, key=lambda s: s.date, reverse=True))


# =============================================================================
# Change Notification
# =============================================================================


@dataclass(frozen=True)
class StoreEvent:
    """
    Emitted once per successful fetch or mutation.

    kind is one of:
    - "snapshot": exercises and all sets were replaced
    - "exercise_sets": one exercise's sets were replaced
    - "exercises": the exercise list was replaced
    - "exercise_patched": one field of a cached exercise was patched
    - "catalogue": the exercise catalogue was replaced
    - "body_weight": body weight logs and profile were replaced
    """
    kind: str
    exercise_id: Optional[str] = None


StoreListener = Callable[[StoreEvent], None]


# =============================================================================
# Store
# =============================================================================


class WorkoutDataStore:
    """
    Cache and mutation gateway for workout data.

    Only the store mutates its own state. Slices are replaced wholesale
    (the exercise list, one exercise's set list) except for the optimistic
    single-field exercise patches.
    """

    def __init__(
        self,
        remote: WorkoutRemote,
        *,
        stale_threshold: float = DEFAULT_STALE_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the store.

        Args:
            remote: Remote client used for every fetch and mutation
            stale_threshold: Seconds a snapshot stays fresh
            clock: Returns the current time; injectable for tests
        """
        self._remote = remote
        self._stale_threshold = timedelta(seconds=stale_threshold)
        self._clock = clock

        self._exercises: Tuple[Exercise, ...] = ()
        self._sets_by_exercise: Dict[str, Tuple[WorkoutSet, ...]] = {}
        self._catalogue: Tuple[Exercise, ...] = ()
        self._body_weight_logs: Tuple[BodyWeightLog, ...] = ()
        self._user_profile: Optional[UserProfile] = None

        self._last_fetched_at: Optional[datetime] = None
        self._fetch_in_flight = False
        self._body_weight_fetched_at: Optional[datetime] = None
        self._body_weight_in_flight = False

        self._is_loading = False
        self._error_message: Optional[str] = None

        self._listeners: List[StoreListener] = []

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def exercises(self) -> Tuple[Exercise, ...]:
        return self._exercises

    @property
    def sets_by_exercise(self) -> Mapping[str, Tuple[WorkoutSet, ...]]:
        return MappingProxyType(self._sets_by_exercise)

    @property
    def catalogue(self) -> Tuple[Exercise, ...]:
        return self._catalogue

    @property
    def body_weight_logs(self) -> Tuple[BodyWeightLog, ...]:
        return self._body_weight_logs

    @property
    def user_profile(self) -> Optional[UserProfile]:
        return self._user_profile

    @property
    def last_fetched_at(self) -> Optional[datetime]:
        return self._last_fetched_at

    @property
    def fetch_in_flight(self) -> bool:
        return self._fetch_in_flight

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def is_stale(self) -> bool:
        """True when the snapshot was never fetched or is older than the TTL."""
        return self._is_older_than_ttl(self._last_fetched_at)

    @property
    def all_sets(self) -> List[WorkoutSet]:
        """Every cached set, flattened across exercises."""
        return [s for sets in self._sets_by_exercise.values() for s in sets]

    @property
    def exercise_dict(self) -> Dict[str, Exercise]:
        """Cached exercises keyed by id."""
        return {exercise.id: exercise for exercise in self._exercises}

    def _is_older_than_ttl(self, fetched_at: Optional[datetime]) -> bool:
        if fetched_at is None:
            return True
        return self._clock() - fetched_at > self._stale_threshold

    # -------------------------------------------------------------------------
    # Notification
    # -------------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Register a listener for state changes.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: str, exercise_id: Optional[str] = None) -> None:
        event = StoreEvent(kind=kind, exercise_id=exercise_id)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Store listener failed handling {event}")

    # -------------------------------------------------------------------------
    # Main Data Fetching
    # -------------------------------------------------------------------------

    async def fetch_all(self, force: bool = False) -> None:
        """
        Refresh exercises and all sets unless the cached snapshot is fresh.

        A call made while another fetch is running returns immediately
        without queuing.

        Args:
            force: Reload even if the snapshot is still fresh
        """
        if not force and not self.is_stale:
            age = (self._clock() - self._last_fetched_at).total_seconds()
            logger.debug(f"Using cached workout data (age: {age:.1f}s)")
            return

        if self._fetch_in_flight:
            logger.debug("Workout data fetch already in progress, skipping")
            return

        self._fetch_in_flight = True
        self._is_loading = True
        self._error_message = None
        started = time.perf_counter()

        try:
            exercises, sets = await self._gather(
                self._remote.fetch_exercises(),
                self._remote.fetch_all_sets(),
            )
        except RemoteOperationError as e:
            self._error_message = f"Failed to load workout data: {e.message}"
            logger.error(f"Error fetching workout data: {e.message}")
            return
        finally:
            self._is_loading = False
            self._fetch_in_flight = False

        grouped: Dict[str, List[WorkoutSet]] = {}
        for workout_set in sets:
            grouped.setdefault(workout_set.exercise_id, []).append(workout_set)

        self._exercises = tuple(exercises)
        self._sets_by_exercise = {
            exercise_id: _newest_first(group) for exercise_id, group in grouped.items()
        }
        self._last_fetched_at = self._clock()

        logger.info(
            f"Fetched {len(self._exercises)} exercises and {len(sets)} sets "
            f"in {time.perf_counter() - started:.2f}s"
        )
        self._notify("snapshot")

    @staticmethod
    async def _gather(*calls: Awaitable[Any]) -> List[Any]:
        """Await calls concurrently; raise the first failure after all finish."""
        results = await asyncio.gather(*calls, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results

    # -------------------------------------------------------------------------
    # Selective Refresh
    # -------------------------------------------------------------------------

    async def refresh_exercise_sets(self, exercise_id: str) -> None:
        """Re-fetch one exercise's sets and replace only that entry."""
        try:
            sets = await self._remote.fetch_sets(exercise_id)
        except RemoteOperationError as e:
            self._error_message = f"Failed to refresh exercise sets: {e.message}"
            logger.error(f"Error refreshing sets for exercise {exercise_id}: {e.message}")
            return

        self._sets_by_exercise[exercise_id] = _newest_first(sets)
        logger.debug(f"Refreshed {len(sets)} sets for exercise {exercise_id}")
        self._notify("exercise_sets", exercise_id)

    async def refresh_exercises(self) -> None:
        """Re-fetch the exercise list only."""
        try:
            exercises = await self._remote.fetch_exercises()
        except RemoteOperationError as e:
            self._error_message = f"Failed to refresh exercises: {e.message}"
            logger.error(f"Error refreshing exercises: {e.message}")
            return

        self._exercises = tuple(exercises)
        logger.debug(f"Refreshed {len(self._exercises)} exercises")
        self._notify("exercises")

    async def refresh_catalogue(self) -> None:
        """Load the full exercise catalogue used for add-exercise suggestions."""
        if await self._load_catalogue():
            self._notify("catalogue")

    async def _load_catalogue(self) -> bool:
        try:
            catalogue = await self._remote.fetch_all_exercises()
        except RemoteOperationError as e:
            self._error_message = f"Failed to load exercise catalogue: {e.message}"
            logger.error(f"Error loading exercise catalogue: {e.message}")
            return False

        self._catalogue = tuple(catalogue)
        logger.debug(f"Loaded {len(self._catalogue)} catalogue exercises")
        return True

    # -------------------------------------------------------------------------
    # Data Access Helpers
    # -------------------------------------------------------------------------

    def get_sets(self, exercise_id: str) -> Tuple[WorkoutSet, ...]:
        return self._sets_by_exercise.get(exercise_id, ())

    def get_exercise(self, exercise_id: str) -> Optional[Exercise]:
        for exercise in self._exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def get_last_session(self, exercise_id: str) -> Optional[WorkoutSet]:
        """Heaviest set of the most recent day before today."""
        return calc.get_last_session_top_set(
            self.get_sets(exercise_id),
            today=calc.local_day(self._clock()),
        )

    def get_last_set(self, exercise_id: str) -> Optional[WorkoutSet]:
        return calc.get_last_set(self.get_sets(exercise_id))

    def get_current_pr(self, exercise_id: str, rep_target: int) -> Optional[PersonalRecord]:
        return calc.get_pr(self.get_sets(exercise_id), rep_target)

    def get_personal_records(self, exercise_id: str) -> List[PersonalRecord]:
        return calc.calculate_prs(self.get_sets(exercise_id))

    def get_current_max(self, exercise_id: str, min_reps: int) -> Optional[float]:
        return calc.get_current_max(self.get_sets(exercise_id), min_reps)

    def get_best_distance(self, exercise_id: str) -> Optional[float]:
        distances = [s.distance for s in self.get_sets(exercise_id) if s.distance is not None]
        return max(distances) if distances else None

    def get_best_pace(self, exercise_id: str) -> Optional[calc.CardioBestPace]:
        return calc.get_best_pace(self.get_sets(exercise_id))

    def get_average_pace(self, exercise_id: str) -> Optional[float]:
        return calc.get_average_pace(self.get_sets(exercise_id))

    def get_chart_data(self, exercise_id: str, rep_filter: int = 1) -> List[calc.WeightPoint]:
        return calc.prepare_chart_data(self.get_sets(exercise_id), rep_filter)

    def get_body_weight_exercise_chart_data(self, exercise_id: str) -> List[calc.RepsPoint]:
        return calc.prepare_body_weight_exercise_chart_data(self.get_sets(exercise_id))

    def get_workout_days(self) -> List[calc.WorkoutDay]:
        """History view: cached sets grouped into labelled days, newest first."""
        return calc.build_workout_days(self.all_sets, self.exercise_dict)

    def get_body_weight_chart_data(self) -> List[calc.WeightPoint]:
        return calc.prepare_body_weight_chart_data(self._body_weight_logs)

    def get_body_weight_summary(self) -> calc.BodyWeightSummary:
        goal = self._user_profile.goal_weight if self._user_profile else None
        return calc.summarize_body_weight(self._body_weight_logs, goal_weight=goal)

    def filter_exercises(
        self,
        muscle_group: Optional[MuscleGroup] = None,
        search_text: str = "",
    ) -> List[Exercise]:
        """
        Filter cached exercises for the exercise list.

        Args:
            muscle_group: Keep exercises tagged with this group (None or ALL keeps all)
            search_text: Case-insensitive substring of the exercise name
        """
        result = self._exercises
        if muscle_group is not None and muscle_group != MuscleGroup.ALL:
            result = [e for e in result if muscle_group in e.muscle_groups]

        needle = search_text.strip().lower()
        if needle:
            result = [e for e in result if needle in e.name.lower()]
        return list(result)

    def suggest_exercises(self, query: str, limit: int = 8) -> List[Exercise]:
        """
        Suggest catalogue exercises while the user types a new exercise name.

        Matches on name or primary muscle group; names starting with the
        query come first, then alphabetical order. Falls back to the cached
        exercise list when the catalogue has not been loaded.
        """
        term = query.strip().lower()
        if len(term) < SUGGESTION_MIN_QUERY_LENGTH:
            return []

        source = self._catalogue or self._exercises
        matches = [
            e for e in source
            if term in e.name.lower() or term in e.muscle_group.value.lower()
        ]
        matches.sort(key=lambda e: (not e.name.lower().startswith(term), e.name.lower()))
        return matches[:limit]

    # -------------------------------------------------------------------------
    # Data Mutations
    # -------------------------------------------------------------------------

    async def _remote_call(self, action: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except RemoteOperationError as e:
            logger.error(f"Failed to {action}: {e.message}")
            raise

    async def log_set(
        self,
        exercise_id: str,
        payload: SetPayload,
        *,
        date: Optional[datetime] = None,
    ) -> None:
        """Log a set, then refresh only that exercise's sets."""
        when = date if date is not None else self._clock()
        await self._remote_call(
            "log set",
            self._remote.log_set(exercise_id, payload, when),
        )
        await self.refresh_exercise_sets(exercise_id)

    async def update_set(self, set_id: str, exercise_id: str, payload: SetPayload) -> None:
        """Replace a set's payload, then refresh only that exercise's sets."""
        await self._remote_call("update set", self._remote.update_set(set_id, payload))
        await self.refresh_exercise_sets(exercise_id)

    async def delete_set(self, set_id: str, exercise_id: str) -> None:
        """Delete a set, then refresh only that exercise's sets."""
        await self._remote_call("delete set", self._remote.delete_set(set_id))
        await self.refresh_exercise_sets(exercise_id)

    async def add_exercise(
        self,
        name: str,
        muscle_group: MuscleGroup,
        exercise_type: ExerciseType = ExerciseType.STRENGTH,
        default_pr_reps: int = 1,
        uses_body_weight: bool = False,
    ) -> Exercise:
        """
        Find or create an exercise for the user, then refresh the exercise list.

        The list is replaced from the remote result, so adding an existing
        exercise never produces a second cache entry.
        """
        exercise = await self._remote_call(
            "add exercise",
            self._remote.add_exercise(
                name=name,
                muscle_group=muscle_group,
                exercise_type=exercise_type,
                default_pr_reps=default_pr_reps,
                uses_body_weight=uses_body_weight,
            ),
        )
        logger.info(f"Exercise added/linked: {exercise.name}")
        await self.refresh_exercises()
        if self._catalogue:
            # No event: refresh_exercises already emitted this mutation's one event.
            await self._load_catalogue()
        return exercise

    # Scalar exercise fields are patched in place after the remote call
    # instead of re-fetching the exercise list.

    async def update_pinned_note(self, exercise_id: str, note: Optional[str]) -> None:
        await self._remote_call(
            "update pinned note",
            self._remote.update_pinned_note(exercise_id, note),
        )
        self._patch_exercise(exercise_id, pinned_note=note)

    async def update_user_pr_reps(self, exercise_id: str, reps: Optional[int]) -> None:
        await self._remote_call(
            "update PR reps",
            self._remote.update_user_pr_reps(exercise_id, reps),
        )
        self._patch_exercise(exercise_id, user_pr_reps=reps)

    async def update_goal_weight(self, exercise_id: str, goal_weight: Optional[float]) -> None:
        await self._remote_call(
            "update goal weight",
            self._remote.update_goal_weight(exercise_id, goal_weight),
        )
        self._patch_exercise(exercise_id, goal_weight=goal_weight)

    async def update_goal_reps(self, exercise_id: str, goal_reps: Optional[int]) -> None:
        await self._remote_call(
            "update goal reps",
            self._remote.update_goal_reps(exercise_id, goal_reps),
        )
        self._patch_exercise(exercise_id, goal_reps=goal_reps)

    def _patch_exercise(self, exercise_id: str, **changes: Any) -> None:
        exercises = list(self._exercises)
        for index, exercise in enumerate(exercises):
            if exercise.id == exercise_id:
                exercises[index] = exercise.model_copy(update=changes)
                self._exercises = tuple(exercises)
                break
        else:
            logger.debug(f"Exercise {exercise_id} not cached; nothing to patch")
        self._notify("exercise_patched", exercise_id)

    # -------------------------------------------------------------------------
    # Body Weight
    # -------------------------------------------------------------------------

    async def fetch_body_weight(self, force: bool = False) -> None:
        """Refresh body weight logs and the user profile, same policy as fetch_all."""
        if not force and not self._is_older_than_ttl(self._body_weight_fetched_at):
            return
        if self._body_weight_in_flight:
            return

        self._body_weight_in_flight = True
        try:
            logs, profile = await self._gather(
                self._remote.fetch_body_weight_logs(),
                self._remote.fetch_user_profile(),
            )
        except RemoteOperationError as e:
            self._error_message = f"Failed to load body weight data: {e.message}"
            logger.error(f"Error fetching body weight data: {e.message}")
            return
        finally:
            self._body_weight_in_flight = False

        self._body_weight_logs = tuple(sorted(logs, key=lambda log: log.date, reverse=True))
        self._user_profile = profile
        self._body_weight_fetched_at = self._clock()
        self._notify("body_weight")

    async def log_body_weight(
        self,
        weight: float,
        *,
        date: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> None:
        when = date if date is not None else self._clock()
        await self._remote_call(
            "log body weight",
            self._remote.log_body_weight(weight, when, notes),
        )
        await self.fetch_body_weight(force=True)

    async def delete_body_weight_log(self, log_id: str) -> None:
        await self._remote_call(
            "delete body weight log",
            self._remote.delete_body_weight_log(log_id),
        )
        await self.fetch_body_weight(force=True)

    async def update_profile_goal_weight(self, goal_weight: Optional[float]) -> None:
        await self._remote_call(
            "update body weight goal",
            self._remote.update_profile_goal_weight(goal_weight),
        )
        await self.fetch_body_weight(force=True)

    # -------------------------------------------------------------------------
    # Cache Management
    # -------------------------------------------------------------------------

    def invalidate(self) -> None:
        """Forget the snapshot timestamp so the next fetch_all reloads.

        The suggestion catalogue is dropped too; callers reload it on demand.
        """
        self._last_fetched_at = None
        self._body_weight_fetched_at = None
        self._catalogue = ()

    async def refresh_if_stale(self) -> None:
        """Reload the snapshot only when it is stale."""
        if self.is_stale:
            await self.fetch_all(force=False)
