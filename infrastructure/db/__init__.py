"""
Infrastructure Database Layer.

This package provides the Supabase-backed implementation of the WorkoutRemote
interface defined in application.ports.

Usage:
    from supabase import acreate_client
    from infrastructure.db import SupabaseWorkoutRemote

    client = await acreate_client(SUPABASE_URL, SUPABASE_KEY)
    remote = SupabaseWorkoutRemote(client)
    exercises = await remote.fetch_exercises()
"""

from infrastructure.db.workout_remote import SupabaseWorkoutRemote

__all__ = [
    "SupabaseWorkoutRemote",
]
