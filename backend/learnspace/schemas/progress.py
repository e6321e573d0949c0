"""
Progress and badge schemas for LearnSpace.
"""

from typing import Optional
from pydantic import BaseModel, Field


class ProgressUpdate(BaseModel):
    challenge_id: int
    points_earned: int = Field(0, ge=0)


class BadgeAward(BaseModel):
    student_id: int
    course_id: int
    badge_name: str = Field(..., min_length=1, max_length=100)
    badge_description: Optional[str] = ""
