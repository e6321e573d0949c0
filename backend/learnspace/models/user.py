"""
User model for LearnSpace.

Defines the User table with authentication fields, profile information,
privacy consent, and relationships to courses and progress tracking.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Dict, Any
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, JSON,
    Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from learnspace.core.database import Base
from learnspace.utils.dates import utcnow, isoformat


class UserRole(str, Enum):
    """Roles a user can hold."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


DEFAULT_PREFERENCES: Dict[str, Any] = {
    "theme": "light",
    "notifications": True,
    "language": "en",
}


class User(Base):
    """
    User model for authentication and profile management.
    """
    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Authentication fields
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile fields
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.STUDENT.value, nullable=False)
    grade: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    school: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferences: Mapped[Dict[str, Any]] = mapped_column(
        JSON, default=lambda: dict(DEFAULT_PREFERENCES), nullable=False
    )

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Privacy consent
    marketing_emails: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    analytics_tracking: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    third_party_sharing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    consent_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Scheduled deletion
    deletion_requested_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    deletion_scheduled_for: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    deletion_grace_period_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Gamification
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    enrolled_courses = relationship(
        "Course", secondary="course_enrollments", back_populates="enrolled_students"
    )
    teaching_courses = relationship("Course", back_populates="instructor")
    submissions = relationship("Submission", back_populates="student", cascade="all, delete-orphan")
    progress_records = relationship("Progress", back_populates="student", cascade="all, delete-orphan")
    audit_logs = relationship("AuditLog", back_populates="user", cascade="all, delete-orphan")

    # Table constraints
    __table_args__ = (
        CheckConstraint("grade IS NULL OR (grade >= 1 AND grade <= 13)", name="check_grade_range"),
        CheckConstraint("points >= 0", name="check_points_positive"),
        CheckConstraint("role IN ('student', 'teacher', 'admin')", name="check_user_role"),
        Index("idx_user_role_active", "role", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_teacher(self) -> bool:
        """Teachers and admins share course management rights."""
        return self.role in (UserRole.TEACHER.value, UserRole.ADMIN.value)

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def privacy_consent(self) -> Dict[str, Any]:
        return {
            "marketing_emails": self.marketing_emails,
            "analytics_tracking": self.analytics_tracking,
            "third_party_sharing": self.third_party_sharing,
            "updated_at": isoformat(self.consent_updated_at or self.created_at),
        }

    def schedule_deletion(self, grace_period_days: int) -> datetime:
        """Deactivate the account and schedule its removal."""
        now = utcnow()
        self.deletion_requested_at = now
        self.deletion_scheduled_for = now + timedelta(days=grace_period_days)
        self.deletion_grace_period_days = grace_period_days
        self.is_active = False
        return self.deletion_scheduled_for

    def cancel_deletion(self) -> None:
        self.deletion_requested_at = None
        self.deletion_scheduled_for = None
        self.deletion_grace_period_days = None
        self.is_active = True

    def to_dict(self) -> Dict[str, Any]:
        """Public representation; never includes the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "grade": self.grade,
            "school": self.school,
            "avatar": self.avatar,
            "bio": self.bio,
            "preferences": self.preferences or dict(DEFAULT_PREFERENCES),
            "is_active": self.is_active,
            "points": self.points,
            "last_login": isoformat(self.last_login),
            "created_at": isoformat(self.created_at),
        }
