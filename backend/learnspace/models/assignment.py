"""
Assignment model for LearnSpace.

An assignment asks a set of enrolled students to solve one challenge of a
course before a due date.
"""

from datetime import datetime
from sqlalchemy import (
    Boolean, Column, Integer, String, DateTime, Text,
    ForeignKey, Table, Index
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from learnspace.core.database import Base


assignment_students = Table(
    "assignment_students",
    Base.metadata,
    Column("assignment_id", Integer, ForeignKey("assignments.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)
    challenge_id: Mapped[int] = mapped_column(Integer, ForeignKey("challenges.id"), nullable=False)
    teacher_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    course = relationship("Course")
    challenge = relationship("Challenge")
    teacher = relationship("User", foreign_keys=[teacher_id])
    assigned_to = relationship("User", secondary=assignment_students, order_by="User.id")
    submissions = relationship("Submission", back_populates="assignment")

    __table_args__ = (
        Index("idx_assignment_due", "due_date"),
        Index("idx_assignment_course", "course_id"),
    )

    def __repr__(self) -> str:
        return f"<Assignment(id={self.id}, title='{self.title}', due={self.due_date})>"
