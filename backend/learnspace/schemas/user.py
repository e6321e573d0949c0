"""
User profile schemas for LearnSpace.
"""

from typing import Optional, Literal
from pydantic import BaseModel, Field


class Preferences(BaseModel):
    theme: Literal["light", "dark"] = "light"
    notifications: bool = True
    language: str = Field("en", min_length=2, max_length=10)


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile. Omitted fields are left alone."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    avatar: Optional[str] = Field(None, max_length=500)
    grade: Optional[int] = Field(None, ge=1, le=13)
    school: Optional[str] = Field(None, max_length=255)
    preferences: Optional[Preferences] = None
