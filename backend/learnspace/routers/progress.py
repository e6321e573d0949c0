"""
Progress router for LearnSpace.

Per-course progress lookup and challenge completion updates.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from learnspace.core.database import get_db
from learnspace.models.user import User
from learnspace.models.course import Challenge, Course
from learnspace.routers.auth import get_current_user, ensure_self_or_teacher
from learnspace.schemas.progress import ProgressUpdate
from learnspace.services.progress import get_progress, get_or_create_progress, progress_to_dict


router = APIRouter()


@router.get("/student/{student_id}/course/{course_id}")
async def get_student_progress(
    student_id: int,
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get a student's progress in a course, with completed challenges.
    """
    ensure_self_or_teacher(current_user, student_id)

    progress = get_progress(db, student_id, course_id)
    if not progress:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Progress not found"
        )

    return progress_to_dict(progress)


@router.put("/student/{student_id}/course/{course_id}")
async def update_student_progress(
    student_id: int,
    course_id: int,
    update: ProgressUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Record a completed challenge and its points.

    Creates the progress record on first use. Completing the same challenge
    again changes nothing.
    """
    ensure_self_or_teacher(current_user, student_id)

    student = db.query(User).filter(User.id == student_id).first()
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )

    if not db.query(Course).filter(Course.id == course_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )

    challenge = db.query(Challenge).filter(Challenge.id == update.challenge_id).first()
    if not challenge or challenge.course_id != course_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Challenge is invalid for this course"
        )

    progress = get_or_create_progress(db, student_id, course_id)
    if progress.record_completion(challenge.id, update.points_earned):
        student.points = (student.points or 0) + update.points_earned

    db.commit()
    db.refresh(progress)

    return progress_to_dict(progress)
