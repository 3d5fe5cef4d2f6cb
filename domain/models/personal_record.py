"""
Personal record value object.

Records are derived from cached sets on demand and never persisted.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PersonalRecord:
    """Heaviest weight lifted for at least ``reps`` repetitions."""
    reps: int
    weight: float
    date: datetime

    @property
    def label(self) -> str:
        return f"{self.reps}RM"

    @property
    def display_text(self) -> str:
        return f"{self.label}: {int(self.weight)} lbs"
