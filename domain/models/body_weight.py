"""
Body weight tracking models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BodyWeightLog(BaseModel):
    """One body weight measurement."""

    id: str = Field(..., min_length=1)
    user_id: str
    weight: float = Field(..., gt=0)
    date: datetime
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class UserProfile(BaseModel):
    """Per-user profile row holding the current and goal body weight."""

    id: str
    user_id: str
    current_weight: Optional[float] = None
    goal_weight: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
