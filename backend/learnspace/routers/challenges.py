"""
Challenges router for LearnSpace.
"""

from typing import List, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from learnspace.core.database import get_db
from learnspace.models.user import User
from learnspace.models.course import Challenge, Course
from learnspace.models.audit import AuditLog, AuditAction
from learnspace.routers.auth import require_teacher, client_info
from learnspace.schemas.course import ChallengeCreate


router = APIRouter()


@router.get("/course/{course_id}")
async def list_course_challenges(
    course_id: int,
    db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    challenges = db.query(Challenge).filter(
        Challenge.course_id == course_id
    ).order_by(Challenge.order_index, Challenge.id).all()

    return [challenge.to_dict() for challenge in challenges]


@router.get("/{challenge_id}")
async def get_challenge(
    challenge_id: int,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    challenge = db.query(Challenge).filter(Challenge.id == challenge_id).first()

    if not challenge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Challenge not found"
        )

    return challenge.to_dict()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    challenge_data: ChallengeCreate,
    request: Request,
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Create a challenge in an existing course.
    """
    course = db.query(Course).filter(Course.id == challenge_data.course_id).first()
    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )

    data = challenge_data.model_dump()
    data["difficulty"] = challenge_data.difficulty.value
    challenge = Challenge(created_by_id=current_user.id, **data)

    db.add(challenge)
    db.flush()

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.CREATE,
        entity_type="challenge",
        entity_id=challenge.id,
        details={"course_id": course.id, "title": challenge.title},
        **client_info(request)
    ))
    db.commit()
    db.refresh(challenge)

    return {
        "message": "Challenge created successfully",
        "challenge": challenge.to_dict()
    }
