"""
Supabase implementation of WorkoutRemote.

This module talks to the hosted Supabase project through the async client.
Tables used:
- exercises: shared and user-created exercises (pinned note, goal weight)
- user_exercises: links a user to an exercise, with per-user overrides
  (user_pr_reps, goal_reps)
- sets: logged workout sets
- body_weight_logs / user_profiles: body weight tracking

Every client failure is logged and re-raised as RemoteOperationError.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from supabase import AsyncClient

from application.exceptions import NotAuthenticatedError, RemoteOperationError
from domain.models import (
    BodyWeightLog,
    Exercise,
    ExerciseType,
    MuscleGroup,
    SetPayload,
    UserProfile,
    WorkoutSet,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

USER_EXERCISE_CONFLICT = "user_id,exercise_id"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so a name is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupabaseWorkoutRemote:
    """
    Supabase implementation of the WorkoutRemote protocol.

    The signed-in user is read from the client's auth session unless a
    ``user_id`` is passed explicitly.
    """

    def __init__(self, client: AsyncClient, *, user_id: Optional[str] = None):
        """
        Initialize with Supabase client.

        Args:
            client: Async Supabase client instance (injected, not global)
            user_id: Fixed user ID; when None the auth session is used
        """
        self._client = client
        self._user_id = user_id

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _current_user_id(self) -> Optional[str]:
        if self._user_id:
            return self._user_id
        try:
            session = await self._client.auth.get_session()
        except Exception as e:
            logger.exception(f"Error reading auth session: {e}")
            raise RemoteOperationError(f"Could not read session: {e}") from e
        if session is None or session.user is None:
            return None
        return str(session.user.id)

    async def _require_user_id(self) -> str:
        user_id = await self._current_user_id()
        if user_id is None:
            raise NotAuthenticatedError()
        return user_id

    async def _execute(self, action: str, query: Any) -> List[Dict[str, Any]]:
        """Run a query builder and return its rows."""
        try:
            response = await query.execute()
        except Exception as e:
            logger.exception(f"Supabase error while trying to {action}: {e}")
            raise RemoteOperationError(f"Could not {action}: {e}") from e
        return response.data or []

    @staticmethod
    def _parse(model: Type[ModelT], rows: List[Dict[str, Any]]) -> List[ModelT]:
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as e:
            logger.error(f"Unexpected {model.__name__} row shape: {e}")
            raise RemoteOperationError(f"Received malformed {model.__name__} data") from e

    # -------------------------------------------------------------------------
    # Exercises
    # -------------------------------------------------------------------------

    async def fetch_exercises(self) -> List[Exercise]:
        """Base exercises plus the user's linked exercises, sorted by name."""
        user_id = await self._current_user_id()
        if user_id is None:
            return []

        base_rows = await self._execute(
            "fetch base exercises",
            self._client.table("exercises").select("*").eq("is_base", True),
        )
        links = await self._execute(
            "fetch user exercises",
            self._client.table("user_exercises")
            .select("exercise_id, user_pr_reps, goal_reps, exercises(*)")
            .eq("user_id", user_id),
        )

        rows: Dict[str, Dict[str, Any]] = {row["id"]: row for row in base_rows}
        overrides: Dict[str, Dict[str, Any]] = {}
        for link in links:
            overrides[link["exercise_id"]] = link
            exercise_row = link.get("exercises")
            if exercise_row and exercise_row["id"] not in rows:
                rows[exercise_row["id"]] = exercise_row

        merged = []
        for exercise_id, row in rows.items():
            link = overrides.get(exercise_id, {})
            merged.append({
                **row,
                "user_pr_reps": link.get("user_pr_reps"),
                "goal_reps": link.get("goal_reps"),
            })

        exercises = self._parse(Exercise, merged)
        return sorted(exercises, key=lambda e: e.name)

    async def fetch_all_exercises(self) -> List[Exercise]:
        rows = await self._execute(
            "fetch exercise catalogue",
            self._client.table("exercises").select("*").order("name"),
        )
        return self._parse(Exercise, rows)

    async def add_exercise(
        self,
        name: str,
        muscle_group: MuscleGroup,
        exercise_type: ExerciseType,
        default_pr_reps: int,
        uses_body_weight: bool,
    ) -> Exercise:
        """
        Find an exercise by name and muscle group, create it if missing, and
        link it to the user.
        """
        user_id = await self._require_user_id()
        name = name.strip()

        existing = await self._execute(
            "look up exercise",
            self._client.table("exercises")
            .select("*")
            .ilike("name", _escape_like(name))
            .eq("muscle_group", muscle_group.value)
            .limit(1),
        )
        if existing:
            row = existing[0]
            logger.info(f"Reusing existing exercise {row['id']} for '{name}'")
        else:
            created = await self._execute(
                "create exercise",
                self._client.table("exercises").insert({
                    "name": name,
                    "muscle_group": muscle_group.value,
                    "exercise_type": exercise_type.value,
                    "is_base": False,
                    "default_pr_reps": default_pr_reps,
                    "uses_body_weight": uses_body_weight,
                }),
            )
            if not created:
                raise RemoteOperationError(f"Could not create exercise '{name}'")
            row = created[0]

        await self._execute(
            "link exercise to user",
            self._client.table("user_exercises").upsert(
                {"user_id": user_id, "exercise_id": row["id"]},
                on_conflict=USER_EXERCISE_CONFLICT,
                ignore_duplicates=True,
            ),
        )
        return self._parse(Exercise, [row])[0]

    async def update_pinned_note(self, exercise_id: str, note: Optional[str]) -> None:
        await self._execute(
            "update pinned note",
            self._client.table("exercises").update({"pinned_note": note}).eq("id", exercise_id),
        )

    async def update_goal_weight(self, exercise_id: str, goal_weight: Optional[float]) -> None:
        await self._execute(
            "update goal weight",
            self._client.table("exercises").update({"goal_weight": goal_weight}).eq("id", exercise_id),
        )

    async def update_user_pr_reps(self, exercise_id: str, reps: Optional[int]) -> None:
        await self._upsert_user_exercise("update PR reps", exercise_id, {"user_pr_reps": reps})

    async def update_goal_reps(self, exercise_id: str, goal_reps: Optional[int]) -> None:
        await self._upsert_user_exercise("update goal reps", exercise_id, {"goal_reps": goal_reps})

    async def _upsert_user_exercise(
        self,
        action: str,
        exercise_id: str,
        values: Dict[str, Any],
    ) -> None:
        user_id = await self._require_user_id()
        await self._execute(
            action,
            self._client.table("user_exercises").upsert(
                {"user_id": user_id, "exercise_id": exercise_id, **values},
                on_conflict=USER_EXERCISE_CONFLICT,
            ),
        )

    # -------------------------------------------------------------------------
    # Sets
    # -------------------------------------------------------------------------

    async def fetch_all_sets(self) -> List[WorkoutSet]:
        user_id = await self._current_user_id()
        if user_id is None:
            return []
        rows = await self._execute(
            "fetch sets",
            self._client.table("sets")
            .select("*")
            .eq("user_id", user_id)
            .order("date", desc=True),
        )
        return self._parse(WorkoutSet, rows)

    async def fetch_sets(self, exercise_id: str) -> List[WorkoutSet]:
        user_id = await self._current_user_id()
        if user_id is None:
            return []
        rows = await self._execute(
            "fetch exercise sets",
            self._client.table("sets")
            .select("*")
            .eq("exercise_id", exercise_id)
            .eq("user_id", user_id)
            .order("date", desc=True),
        )
        return self._parse(WorkoutSet, rows)

    async def log_set(self, exercise_id: str, payload: SetPayload, date: datetime) -> None:
        user_id = await self._require_user_id()
        await self._execute(
            "log set",
            self._client.table("sets").insert({
                "exercise_id": exercise_id,
                "user_id": user_id,
                "date": date.isoformat(),
                **payload.to_row(),
            }),
        )

    async def update_set(self, set_id: str, payload: SetPayload) -> None:
        # All payload columns are written so no value of the old shape survives.
        await self._execute(
            "update set",
            self._client.table("sets").update(payload.to_row()).eq("id", set_id),
        )

    async def delete_set(self, set_id: str) -> None:
        await self._execute(
            "delete set",
            self._client.table("sets").delete().eq("id", set_id),
        )

    # -------------------------------------------------------------------------
    # Body weight
    # -------------------------------------------------------------------------

    async def fetch_body_weight_logs(self) -> List[BodyWeightLog]:
        user_id = await self._current_user_id()
        if user_id is None:
            return []
        rows = await self._execute(
            "fetch body weight logs",
            self._client.table("body_weight_logs")
            .select("*")
            .eq("user_id", user_id)
            .order("date", desc=True),
        )
        return self._parse(BodyWeightLog, rows)

    async def log_body_weight(
        self,
        weight: float,
        date: datetime,
        notes: Optional[str] = None,
    ) -> None:
        user_id = await self._require_user_id()
        await self._execute(
            "log body weight",
            self._client.table("body_weight_logs").insert({
                "user_id": user_id,
                "weight": weight,
                "date": date.isoformat(),
                "notes": notes or None,
            }),
        )
        await self._execute(
            "update current weight",
            self._client.table("user_profiles")
            .update({
                "current_weight": weight,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })
            .eq("user_id", user_id),
        )

    async def delete_body_weight_log(self, log_id: str) -> None:
        await self._execute(
            "delete body weight log",
            self._client.table("body_weight_logs").delete().eq("id", log_id),
        )

    async def fetch_user_profile(self) -> Optional[UserProfile]:
        user_id = await self._current_user_id()
        if user_id is None:
            return None
        rows = await self._execute(
            "fetch user profile",
            self._client.table("user_profiles").select("*").eq("user_id", user_id).limit(1),
        )
        profiles = self._parse(UserProfile, rows)
        return profiles[0] if profiles else None

    async def update_profile_goal_weight(self, goal_weight: Optional[float]) -> None:
        user_id = await self._require_user_id()
        await self._execute(
            "update body weight goal",
            self._client.table("user_profiles")
            .update({"goal_weight": goal_weight})
            .eq("user_id", user_id),
        )
