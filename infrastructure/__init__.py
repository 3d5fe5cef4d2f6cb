"""
Infrastructure Layer for the Plates API.

This package contains concrete implementations of the remote client interface:
- db/: Supabase implementation
"""

from infrastructure.db import SupabaseWorkoutRemote

__all__ = [
    "SupabaseWorkoutRemote",
]
