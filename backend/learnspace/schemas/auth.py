"""
Authentication schemas for LearnSpace.
"""

from datetime import datetime
from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegister(BaseModel):
    """Registration request. Admin accounts cannot self-register."""
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Literal["student", "teacher"] = "student"
    grade: Optional[int] = Field(None, ge=1, le=13)
    school: Optional[str] = Field(None, max_length=255)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    grade: Optional[int] = None
    school: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    preferences: Dict[str, Any] = {}
    is_active: bool
    points: int = 0
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class Token(BaseModel):
    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class RegisterResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
