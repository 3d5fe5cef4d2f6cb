"""
Remote Client Interfaces (Ports) for the Plates API.

This package defines the interface that decouples the workout data store from
the hosted database. Implementations are provided in the infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the store needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import WorkoutRemote

    class WorkoutDataStore:
        def __init__(self, remote: WorkoutRemote):
            self._remote = remote
"""

from application.ports.workout_remote import WorkoutRemote

__all__ = [
    "WorkoutRemote",
]
