"""
Badges router for LearnSpace.

Badge catalogue, earned badges, manual awards by teachers and the
automatic badge check.
"""

from typing import List, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from learnspace.core.database import get_db
from learnspace.models.user import User
from learnspace.models.badge import Badge
from learnspace.models.progress import Progress
from learnspace.models.audit import AuditLog, AuditAction
from learnspace.routers.auth import get_current_user, require_teacher, ensure_self_or_teacher, client_info
from learnspace.schemas.progress import BadgeAward
from learnspace.services.badges import check_badges
from learnspace.services.progress import get_progress, progress_to_dict, badge_to_dict


router = APIRouter()


@router.get("/")
async def list_badges(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """
    Active badges in the catalogue.
    """
    badges = db.query(Badge).filter(Badge.is_active == True).order_by(Badge.id).all()  # noqa: E712
    return [
        {
            "id": badge.id,
            "name": badge.name,
            "description": badge.description,
            "icon": badge.icon,
            "category": badge.category,
            "required_points": badge.required_points,
            "required_challenges": badge.required_challenges,
        }
        for badge in badges
    ]


@router.get("/student/{student_id}")
async def list_student_badges(
    student_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    """
    Every badge a student has earned, across all courses.
    """
    ensure_self_or_teacher(current_user, student_id)

    records = db.query(Progress).filter(
        Progress.student_id == student_id
    ).order_by(Progress.course_id).all()

    return [
        {**badge_to_dict(badge), "course_id": record.course_id}
        for record in records
        for badge in record.badges
    ]


@router.post("/award")
async def award_badge(
    award: BadgeAward,
    request: Request,
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Award a badge by hand.
    """
    progress = get_progress(db, award.student_id, award.course_id)
    if not progress:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Progress not found"
        )

    if not progress.award_badge(award.badge_name, award.badge_description or ""):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Badge already awarded"
        )

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.AWARD,
        entity_type="progress",
        entity_id=progress.id,
        details={"student_id": award.student_id, "badge": award.badge_name},
        **client_info(request)
    ))
    db.commit()
    db.refresh(progress)

    return {
        "message": "Badge awarded successfully",
        "progress": progress_to_dict(progress)
    }


@router.post("/check/{student_id}/{course_id}")
async def check_student_badges(
    student_id: int,
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Run the automatic badge rules for one student and course.
    """
    ensure_self_or_teacher(current_user, student_id)

    progress = get_progress(db, student_id, course_id)
    if not progress:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Progress not found"
        )

    new_badges = check_badges(progress)
    if new_badges:
        db.commit()
        db.refresh(progress)

    return {
        "new_badges": new_badges,
        "progress": progress_to_dict(progress)
    }
