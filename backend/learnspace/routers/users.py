"""
Users router for LearnSpace.

Profile viewing and editing, and the admin user list.
"""

from typing import List, Dict, Any
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnspace.core.database import get_db
from learnspace.models.user import User, DEFAULT_PREFERENCES
from learnspace.routers.auth import get_current_user, require_admin
from learnspace.schemas.auth import UserResponse
from learnspace.schemas.user import ProfileUpdate


router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Update the current user's profile. Only fields present in the body change.
    """
    changes = profile.model_dump(exclude_unset=True)

    preferences = changes.pop("preferences", None)
    if preferences is not None:
        current_user.preferences = {**DEFAULT_PREFERENCES, **(current_user.preferences or {}), **preferences}

    for field, value in changes.items():
        # Names are required columns; an explicit null leaves them unchanged
        if value is None and field in ("first_name", "last_name"):
            continue
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)

    return {
        "message": "Profile updated successfully",
        "user": UserResponse.model_validate(current_user)
    }


@router.get("/", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> List[User]:
    """
    All users (admin only).
    """
    return db.query(User).order_by(User.id).all()
