"""
Submission model for LearnSpace.

A submission is one attempt by a student at a challenge, graded by running
the code through the execution sandbox.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from learnspace.core.database import Base
from learnspace.utils.dates import utcnow, isoformat


class SubmissionLanguage(str, Enum):
    """Languages a submission can be written in."""
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    BLOCKLY = "blockly"


class SubmissionResult(str, Enum):
    """Grading outcome of a submission."""
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


class Submission(Base):
    """
    Student code submitted against a challenge.
    """
    __tablename__ = "submissions"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # References
    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    challenge_id: Mapped[int] = mapped_column(Integer, ForeignKey("challenges.id"), nullable=False)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)
    assignment_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("assignments.id"), nullable=True
    )

    # Code
    code: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(
        String(20), default=SubmissionLanguage.JAVASCRIPT.value, nullable=False
    )

    # Grading
    result: Mapped[str] = mapped_column(
        String(20), default=SubmissionResult.PENDING.value, nullable=False
    )
    tests_passed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_tests: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    execution_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # milliseconds
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Attempt tracking
    time_spent: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # seconds
    attempts: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_first_attempt: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Timestamps
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    student = relationship("User", back_populates="submissions")
    challenge = relationship("Challenge")
    course = relationship("Course")
    assignment = relationship("Assignment", back_populates="submissions")

    __table_args__ = (
        CheckConstraint("tests_passed >= 0", name="check_tests_passed_positive"),
        CheckConstraint("tests_passed <= total_tests", name="check_tests_passed_bounded"),
        CheckConstraint(
            "result IN ('pending', 'passed', 'failed', 'error')", name="check_submission_result"
        ),
        Index("idx_submission_student_challenge", "student_id", "challenge_id"),
        Index("idx_submission_assignment_student", "assignment_id", "student_id"),
    )

    def __repr__(self) -> str:
        return f"<Submission(id={self.id}, student_id={self.student_id}, result='{self.result}')>"

    @property
    def passed(self) -> bool:
        return self.result == SubmissionResult.PASSED.value

    @property
    def score_ratio(self) -> float:
        """Fraction of tests passed, 0 when nothing was tested."""
        if not self.total_tests:
            return 0.0
        return self.tests_passed / self.total_tests

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "challenge_id": self.challenge_id,
            "challenge_title": self.challenge.title if self.challenge else None,
            "course_id": self.course_id,
            "assignment_id": self.assignment_id,
            "code": self.code,
            "language": self.language,
            "result": self.result,
            "tests_passed": self.tests_passed,
            "total_tests": self.total_tests,
            "feedback": self.feedback,
            "execution_time": self.execution_time,
            "points_earned": self.points_earned,
            "time_spent": self.time_spent,
            "attempts": self.attempts,
            "is_first_attempt": self.is_first_attempt,
            "submitted_at": isoformat(self.submitted_at),
            "completed_at": isoformat(self.completed_at),
        }
