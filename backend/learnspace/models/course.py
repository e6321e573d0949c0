"""
Course models for LearnSpace.

Defines Course and Challenge models and the enrollment association
between students and courses.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any
from sqlalchemy import (
    Boolean, Column, Integer, String, DateTime, Text, JSON,
    ForeignKey, Table, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from learnspace.core.database import Base
from learnspace.utils.dates import isoformat


class DifficultyLevel(str, Enum):
    """Difficulty levels for courses."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ChallengeDifficulty(str, Enum):
    """Difficulty levels for challenges."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


course_enrollments = Table(
    "course_enrollments",
    Base.metadata,
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("enrolled_at", DateTime, server_default=func.now(), nullable=False),
)


class Course(Base):
    """
    Course model grouping lessons and coding challenges for a grade range.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Course metadata
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    target_grades: Mapped[List[int]] = mapped_column(JSON, default=list, nullable=False)
    difficulty: Mapped[str] = mapped_column(
        String(20), default=DifficultyLevel.BEGINNER.value, nullable=False
    )
    topics: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    lessons: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    # Publishing
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    instructor = relationship("User", back_populates="teaching_courses")
    challenges = relationship(
        "Challenge",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Challenge.order_index",
    )
    enrolled_students = relationship(
        "User", secondary=course_enrollments, back_populates="enrolled_courses"
    )

    __table_args__ = (
        CheckConstraint(
            "difficulty IN ('beginner', 'intermediate', 'advanced')", name="check_course_difficulty"
        ),
        Index("idx_course_published_difficulty", "is_published", "difficulty"),
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}')>"

    def is_enrolled(self, user_id: int) -> bool:
        return any(student.id == user_id for student in self.enrolled_students)

    def targets_grade(self, grade: int) -> bool:
        return grade in (self.target_grades or [])

    def to_dict(self, include_challenges: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "instructor": {
                "id": self.instructor.id,
                "first_name": self.instructor.first_name,
                "last_name": self.instructor.last_name,
            } if self.instructor else None,
            "target_grades": self.target_grades or [],
            "difficulty": self.difficulty,
            "topics": self.topics or [],
            "lessons": self.lessons or [],
            "is_published": self.is_published,
            "enrolled_count": len(self.enrolled_students),
            "challenge_count": len(self.challenges),
            "created_at": isoformat(self.created_at),
        }
        if include_challenges:
            data["challenges"] = [c.to_dict() for c in self.challenges]
        return data


class Challenge(Base):
    """
    Coding challenge within a course. Can be solved with blocks or raw code.
    """
    __tablename__ = "challenges"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)
    difficulty: Mapped[str] = mapped_column(
        String(20), default=ChallengeDifficulty.EASY.value, nullable=False
    )

    # Content
    objectives: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    initial_code: Mapped[str] = mapped_column(Text, default="", nullable=False)
    expected_output: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    test_cases: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)  # [{input, expected_output, description}]
    hints: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    language: Mapped[str] = mapped_column(String(20), default="python", nullable=False)

    # Gamification and limits
    gamification_points: Mapped[int] = mapped_column(Integer, default=100, nullable=False)
    time_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes

    # Editor support
    is_programming_challenge: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_block_based: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Ordering and visibility
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    course = relationship("Course", back_populates="challenges")
    created_by = relationship("User")

    __table_args__ = (
        CheckConstraint("gamification_points >= 0", name="check_challenge_points_positive"),
        CheckConstraint("difficulty IN ('easy', 'medium', 'hard')", name="check_challenge_difficulty"),
        Index("idx_challenge_course_order", "course_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<Challenge(id={self.id}, title='{self.title}', course_id={self.course_id})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "objectives": self.objectives or [],
            "instructions": self.instructions,
            "initial_code": self.initial_code,
            "expected_output": self.expected_output,
            "test_cases": self.test_cases or [],
            "hints": self.hints or [],
            "language": self.language,
            "gamification_points": self.gamification_points,
            "time_limit": self.time_limit,
            "is_programming_challenge": self.is_programming_challenge,
            "is_block_based": self.is_block_based,
            "order_index": self.order_index,
            "is_published": self.is_published,
            "created_at": isoformat(self.created_at),
        }
