"""
Database models for LearnSpace.

This module contains all SQLAlchemy models for the application:
- User models for authentication, profiles and privacy consent
- Course and challenge models for learning content
- Submission, progress and badge models for grading and gamification
- Assignment models for teacher-set work
- Audit log for security relevant actions
"""

from learnspace.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole
from .course import Course, Challenge, course_enrollments
from .submission import Submission
from .progress import Progress, CompletedChallenge, EarnedBadge
from .badge import Badge
from .assignment import Assignment, assignment_students
from .audit import AuditLog, AuditAction

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Course",
    "Challenge",
    "course_enrollments",
    "Submission",
    "Progress",
    "CompletedChallenge",
    "EarnedBadge",
    "Badge",
    "Assignment",
    "assignment_students",
    "AuditLog",
    "AuditAction",
]
