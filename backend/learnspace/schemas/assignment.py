"""
Assignment schemas for LearnSpace.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class AssignmentStatus(str, Enum):
    """Where a student stands on an assignment, from the teacher's side."""
    COMPLETED = "completed"
    COMPLETED_LATE = "completed_late"
    MISSING = "missing"
    PENDING = "pending"


class StudentAssignmentStatus(str, Enum):
    """Where a student stands on an assignment, from the student's side."""
    COMPLETED = "completed"
    OVERDUE = "overdue"
    PENDING = "pending"


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    course_id: int
    challenge_id: int
    due_date: datetime
    assigned_to: Optional[List[int]] = None
