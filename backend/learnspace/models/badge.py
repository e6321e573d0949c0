"""
Badge catalogue model for LearnSpace.
"""

from datetime import datetime
from enum import Enum
from sqlalchemy import Boolean, Integer, String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from learnspace.core.database import Base


class BadgeCategory(str, Enum):
    COMPLETION = "completion"
    STREAK = "streak"
    MASTERY = "mastery"
    SPEED = "speed"
    SPECIAL = "special"


class Badge(Base):
    """
    A badge students can earn, with the thresholds that unlock it.
    """
    __tablename__ = "badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(String(16), default="\U0001F3C6", nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), default=BadgeCategory.COMPLETION.value, nullable=False
    )

    # Unlock thresholds
    required_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    required_challenges: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    required_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Badge(name='{self.name}', category='{self.category}')>"
