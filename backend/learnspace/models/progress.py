"""
Progress tracking models for LearnSpace.

Defines Progress (one row per student and course), the challenges a
student has completed in that course, and the badges earned there.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from sqlalchemy import (
    Integer, String, DateTime, Float, Text, JSON,
    ForeignKey, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from learnspace.core.config import settings
from learnspace.core.database import Base
from learnspace.utils.dates import utcnow


class LearningPath(str, Enum):
    """Preferred way of working through a course."""
    VISUAL = "visual"
    TEXT_BASED = "text-based"
    MIXED = "mixed"


class Progress(Base):
    """
    Tracks a student's points, level and completions within one course.
    """
    __tablename__ = "progress"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Student and course relationship
    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)

    # Scoring
    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    experience_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    average_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    achievements: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    # Learning preferences
    learning_path: Mapped[str] = mapped_column(
        String(20), default=LearningPath.VISUAL.value, nullable=False
    )
    estimated_time_to_completion: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # hours

    # Timestamps
    last_activity_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    student = relationship("User", back_populates="progress_records")
    course = relationship("Course")
    completed_challenges = relationship(
        "CompletedChallenge",
        back_populates="progress",
        cascade="all, delete-orphan",
        order_by="CompletedChallenge.completed_at",
    )
    badges = relationship(
        "EarnedBadge",
        back_populates="progress",
        cascade="all, delete-orphan",
        order_by="EarnedBadge.earned_at",
    )

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_student_course_progress"),
        CheckConstraint("total_points >= 0", name="check_progress_points_positive"),
        CheckConstraint("current_level >= 1", name="check_progress_level_positive"),
        Index("idx_progress_student", "student_id"),
    )

    def __repr__(self) -> str:
        return f"<Progress(student_id={self.student_id}, course_id={self.course_id}, points={self.total_points})>"

    def has_completed(self, challenge_id: int) -> bool:
        return any(c.challenge_id == challenge_id for c in self.completed_challenges)

    def has_badge(self, name: str) -> bool:
        return any(b.name == name for b in self.badges)

    def record_completion(self, challenge_id: int, points_earned: int = 0) -> bool:
        """
        Mark a challenge completed and add its points.

        Returns:
            bool: False when the challenge was already completed (no change)
        """
        if self.has_completed(challenge_id):
            return False

        now = utcnow()
        self.completed_challenges.append(CompletedChallenge(
            challenge_id=challenge_id,
            completed_at=now,
            points_earned=points_earned,
        ))
        self.total_points = (self.total_points or 0) + points_earned
        self.experience_points = (self.experience_points or 0) + points_earned
        self.update_level()
        self.last_activity_at = now
        return True

    def update_level(self) -> None:
        """Level is derived from total points: level = points // POINTS_PER_LEVEL + 1."""
        self.current_level = (self.total_points or 0) // settings.POINTS_PER_LEVEL + 1

    def award_badge(self, name: str, description: str) -> bool:
        """Append a badge unless it was already earned in this course."""
        if self.has_badge(name):
            return False
        self.badges.append(EarnedBadge(name=name, description=description, earned_at=utcnow()))
        return True


class CompletedChallenge(Base):
    """
    A challenge a student completed inside one course's progress record.
    """
    __tablename__ = "completed_challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    progress_id: Mapped[int] = mapped_column(Integer, ForeignKey("progress.id"), nullable=False)
    challenge_id: Mapped[int] = mapped_column(Integer, ForeignKey("challenges.id"), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    progress = relationship("Progress", back_populates="completed_challenges")
    challenge = relationship("Challenge")

    __table_args__ = (
        UniqueConstraint("progress_id", "challenge_id", name="uq_progress_challenge"),
    )


class EarnedBadge(Base):
    """
    Badge awarded to a student within one course.
    """
    __tablename__ = "earned_badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    progress_id: Mapped[int] = mapped_column(Integer, ForeignKey("progress.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    earned_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    progress = relationship("Progress", back_populates="badges")

    __table_args__ = (
        UniqueConstraint("progress_id", "name", name="uq_progress_badge_name"),
    )
