"""
Workout calculations over cached set data.

This module derives every analytical view the app shows from plain lists of
sets and body weight logs:
- Personal records for the fixed rep menu and for arbitrary rep targets
- "Last session" top set and "last set" lookups
- Chart series (weight per day, reps per day, body weight)
- Cardio pace figures
- Workout-day grouping and labelling

All functions are pure. They never touch the network or the cache and return
the same result for the same input.

Day grouping uses the local calendar day of each timestamp. Naive datetimes
are taken as local wall-clock time.

When several sets tie for a maximum, the first one in input order wins. The
data store keeps each exercise's sets newest first, so through the store the
most recent of the tied sets is returned.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from domain.models import (
    BodyWeightLog,
    Exercise,
    MuscleGroup,
    PersonalRecord,
    WorkoutSet,
    format_weight,
)

# Rep targets shown in the personal records table, in display order.
PR_REP_TARGETS: Tuple[int, ...] = (1, 3, 5, 8, 10)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class WeightPoint:
    """One chart point: a day and a weight."""
    date: date
    weight: float


@dataclass(frozen=True)
class RepsPoint:
    """One chart point for body-weight exercises: a day and a rep count."""
    date: date
    reps: int


@dataclass(frozen=True)
class CardioBestPace:
    """Fastest cardio set, pace in minutes per mile."""
    pace: float
    distance: float
    duration: int
    date: datetime


@dataclass(frozen=True)
class BodyWeightSummary:
    """Starting, current and goal body weight."""
    starting_weight: Optional[float] = None
    current_weight: Optional[float] = None
    goal_weight: Optional[float] = None

    @property
    def total_change(self) -> Optional[float]:
        if self.starting_weight is None or self.current_weight is None:
            return None
        return self.current_weight - self.starting_weight

    @property
    def remaining_to_goal(self) -> Optional[float]:
        if self.goal_weight is None or self.current_weight is None:
            return None
        return self.goal_weight - self.current_weight


@dataclass
class WorkoutDay:
    """All sets logged on one calendar day, with a workout label."""
    date: date
    label: str
    sets: List[WorkoutSet] = field(default_factory=list)


# =============================================================================
# Helpers
# =============================================================================


def local_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in the local timezone."""
    if moment.tzinfo is not None:
        return moment.astimezone().date()
    return moment.date()


def _weight_or_zero(workout_set: WorkoutSet) -> float:
    return workout_set.weight if workout_set.weight is not None else 0.0


def _reps_or_zero(workout_set: WorkoutSet) -> int:
    return workout_set.reps if workout_set.reps is not None else 0


# =============================================================================
# Personal Records
# =============================================================================


def get_pr(sets: Iterable[WorkoutSet], rep_target: int) -> Optional[PersonalRecord]:
    """
    Get the personal record for a single rep target.

    The record is the heaviest weight among sets with at least
    ``rep_target`` reps. Any target is accepted, not just the fixed menu.

    Args:
        sets: Sets to search
        rep_target: Minimum reps a set needs to qualify

    Returns:
        PersonalRecord, or None if no set qualifies
    """
    qualifying = [
        s for s in sets
        if _reps_or_zero(s) >= rep_target and s.weight is not None
    ]
    if not qualifying:
        return None

    best = max(qualifying, key=_weight_or_zero)
    return PersonalRecord(reps=rep_target, weight=best.weight, date=best.date)


def calculate_prs(sets: Sequence[WorkoutSet]) -> List[PersonalRecord]:
    """
    Calculate personal records for each target in PR_REP_TARGETS.

    Targets without a qualifying set are omitted rather than reported as
    zero, so the result may be shorter than the menu.
    """
    records: List[PersonalRecord] = []
    for target in PR_REP_TARGETS:
        record = get_pr(sets, target)
        if record is not None:
            records.append(record)
    return records


def get_current_max(sets: Iterable[WorkoutSet], min_reps: int) -> Optional[float]:
    """Heaviest weight among sets with at least ``min_reps`` reps."""
    weights = [
        s.weight for s in sets
        if _reps_or_zero(s) >= min_reps and s.weight is not None
    ]
    return max(weights) if weights else None


# =============================================================================
# Last Session & Last Set
# =============================================================================


def get_last_session_top_set(
    sets: Iterable[WorkoutSet],
    *,
    today: Optional[date] = None,
) -> Optional[WorkoutSet]:
    """
    Get the heaviest set from the most recent session before today.

    Sets logged today are ignored so an in-progress workout never shows up
    as "last time".

    Args:
        sets: Sets of a single exercise
        today: Local calendar day to treat as today (defaults to date.today())

    Returns:
        The heaviest set of the latest prior day, or None without prior data
    """
    if today is None:
        today = date.today()

    by_day: Dict[date, List[WorkoutSet]] = defaultdict(list)
    for workout_set in sets:
        day = local_day(workout_set.date)
        if day < today:
            by_day[day].append(workout_set)

    if not by_day:
        return None

    last_session = by_day[max(by_day)]
    return max(last_session, key=_weight_or_zero)


def get_last_set(sets: Iterable[WorkoutSet]) -> Optional[WorkoutSet]:
    """Most recent set by date."""
    sets = list(sets)
    if not sets:
        return None
    return max(sets, key=lambda s: s.date)


# =============================================================================
# Chart Data
# =============================================================================


def prepare_chart_data(sets: Iterable[WorkoutSet], rep_filter: int) -> List[WeightPoint]:
    """
    Build the weight progression series for an exercise.

    Keeps sets with at least ``rep_filter`` reps, takes the heaviest weight of
    each day and returns the points oldest first.
    """
    best_by_day: Dict[date, float] = {}
    for workout_set in sets:
        if _reps_or_zero(workout_set) < rep_filter or workout_set.weight is None:
            continue
        day = local_day(workout_set.date)
        current = best_by_day.get(day)
        if current is None or workout_set.weight > current:
            best_by_day[day] = workout_set.weight

    return [WeightPoint(date=day, weight=best_by_day[day]) for day in sorted(best_by_day)]


def prepare_body_weight_chart_data(logs: Iterable[BodyWeightLog]) -> List[WeightPoint]:
    """One point per body weight log, at day granularity, oldest first."""
    points = [WeightPoint(date=local_day(log.date), weight=log.weight) for log in logs]
    return sorted(points, key=lambda p: p.date)


def summarize_body_weight(
    logs: Iterable[BodyWeightLog],
    *,
    goal_weight: Optional[float] = None,
) -> BodyWeightSummary:
    """Starting weight is the oldest log, current weight the newest."""
    ordered = sorted(logs, key=lambda log: log.date)
    if not ordered:
        return BodyWeightSummary(goal_weight=goal_weight)
    return BodyWeightSummary(
        starting_weight=ordered[0].weight,
        current_weight=ordered[-1].weight,
        goal_weight=goal_weight,
    )


def prepare_body_weight_exercise_chart_data(sets: Iterable[WorkoutSet]) -> List[RepsPoint]:
    """
    Build the reps progression series for a body-weight exercise.

    For each day the set with the most reps is kept; sets without a positive
    rep count are skipped.
    """
    best_by_day: Dict[date, int] = {}
    for workout_set in sets:
        reps = workout_set.reps
        if reps is None or reps <= 0:
            continue
        day = local_day(workout_set.date)
        if reps > best_by_day.get(day, 0):
            best_by_day[day] = reps

    return [RepsPoint(date=day, reps=best_by_day[day]) for day in sorted(best_by_day)]


# =============================================================================
# Cardio Pace
# =============================================================================


def calculate_pace(workout_set: WorkoutSet) -> Optional[float]:
    """Minutes per mile for a cardio set, or None if it has no distance."""
    if not workout_set.is_cardio or workout_set.distance <= 0:
        return None
    return workout_set.duration / workout_set.distance


def get_best_pace(sets: Iterable[WorkoutSet]) -> Optional[CardioBestPace]:
    """The fastest (lowest minutes-per-mile) cardio set."""
    best: Optional[CardioBestPace] = None
    for workout_set in sets:
        pace = calculate_pace(workout_set)
        if pace is None:
            continue
        if best is None or pace < best.pace:
            best = CardioBestPace(
                pace=pace,
                distance=workout_set.distance,
                duration=workout_set.duration,
                date=workout_set.date,
            )
    return best


def get_average_pace(sets: Iterable[WorkoutSet]) -> Optional[float]:
    """
    Average pace across all cardio sets.

    Weighted by distance: total minutes over total miles, so one long run
    counts for more than a short sprint.
    """
    total_distance = 0.0
    total_duration = 0
    for workout_set in sets:
        if not workout_set.is_cardio or workout_set.distance <= 0:
            continue
        total_distance += workout_set.distance
        total_duration += workout_set.duration

    if total_distance == 0:
        return None
    return total_duration / total_distance


def format_pace(pace: float) -> str:
    """
    Format minutes per mile as ``M:SS``.

    Seconds are truncated, never rounded up into the next minute.

    Examples:
        >>> format_pace(8.5)
        '8:30'
        >>> format_pace(8.999)
        '8:59'
    """
    minutes = int(pace)
    seconds = int((pace - minutes) * 60)
    return f"{minutes}:{seconds:02d}"


def format_weight_for_display(weight: float, uses_body_weight: bool) -> str:
    """Weight label for cards and tables (``185 lbs``, ``BW``, ``BW + 25 lbs``)."""
    return format_weight(weight, uses_body_weight)


# =============================================================================
# Workout Days & Labels
# =============================================================================


def determine_workout_label(exercises: Sequence[Tuple[str, MuscleGroup]]) -> str:
    """
    Label a day's workout from the muscle groups trained.

    Rules are checked in order and the first match wins:
    1. Chest with Shoulders or Triceps -> "Push"
    2. Back with Biceps, at most one Shoulders exercise -> "Pull"
    3. Shoulders with Arms -> "Sharms"
    4. Legs only -> "Legs"
    5. Otherwise the single group name, "A & B" for two groups
       (alphabetical), or "Mixed" for three or more

    Args:
        exercises: (exercise name, primary muscle group) per set or exercise

    Returns:
        The workout label
    """
    groups = [MuscleGroup(group) for _, group in exercises]
    unique = set(groups)

    if MuscleGroup.CHEST in unique and (
        MuscleGroup.SHOULDERS in unique or MuscleGroup.TRICEPS in unique
    ):
        return "Push"

    if MuscleGroup.BACK in unique and MuscleGroup.BICEPS in unique:
        shoulder_count = sum(1 for g in groups if g == MuscleGroup.SHOULDERS)
        if shoulder_count <= 1:
            return "Pull"

    if MuscleGroup.SHOULDERS in unique and MuscleGroup.ARMS in unique:
        return "Sharms"

    if unique == {MuscleGroup.LEGS}:
        return "Legs"

    names = sorted(g.value for g in unique)
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} & {names[1]}"
    return "Mixed"


def group_sets_by_day(sets: Iterable[WorkoutSet]) -> List[Tuple[date, List[WorkoutSet]]]:
    """Group sets by local day, newest day first and newest set first."""
    by_day: Dict[date, List[WorkoutSet]] = defaultdict(list)
    for workout_set in sets:
        by_day[local_day(workout_set.date)].append(workout_set)

    return [
        (day, sorted(by_day[day], key=lambda s: s.date, reverse=True))
        for day in sorted(by_day, reverse=True)
    ]


def build_workout_days(
    sets: Iterable[WorkoutSet],
    exercises: Mapping[str, Exercise],
) -> List[WorkoutDay]:
    """
    Build the history view: one labelled WorkoutDay per calendar day.

    Sets whose exercise is not in ``exercises`` are still listed but do not
    contribute to the label.
    """
    days: List[WorkoutDay] = []
    for day, day_sets in group_sets_by_day(sets):
        worked = [
            (exercises[s.exercise_id].name, exercises[s.exercise_id].muscle_group)
            for s in day_sets
            if s.exercise_id in exercises
        ]
        days.append(WorkoutDay(date=day, label=determine_workout_label(worked), sets=day_sets))
    return days
