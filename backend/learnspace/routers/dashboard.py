"""
Dashboard router for LearnSpace.

Summary views for teachers and students, and per-student analytics for
teachers.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from learnspace.core.database import get_db
from learnspace.models.user import User
from learnspace.models.course import Course
from learnspace.models.progress import Progress
from learnspace.models.submission import Submission
from learnspace.routers.auth import require_teacher, require_student
from learnspace.schemas.auth import UserResponse
from learnspace.services.progress import progress_to_dict
from learnspace.utils.dates import isoformat


router = APIRouter()


@router.get("/teacher")
async def teacher_dashboard(
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Courses taught by the current user and their enrollment counts.
    """
    courses = db.query(Course).options(
        selectinload(Course.enrolled_students)
    ).filter(Course.instructor_id == current_user.id).order_by(Course.id).all()

    return {
        "total_courses": len(courses),
        "total_students": sum(len(c.enrolled_students) for c in courses),
        "courses": [
            {
                "id": course.id,
                "title": course.title,
                "enrolled_count": len(course.enrolled_students),
                "target_grades": course.target_grades or [],
                "difficulty": course.difficulty,
                "is_published": course.is_published,
                "created_at": isoformat(course.created_at),
            }
            for course in courses
        ]
    }


@router.get("/student")
async def student_dashboard(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    records = db.query(Progress).options(
        selectinload(Progress.course),
        selectinload(Progress.completed_challenges)
    ).filter(Progress.student_id == current_user.id).order_by(Progress.course_id).all()

    return {
        "user": UserResponse.model_validate(current_user),
        "enrolled_courses": [
            {"id": course.id, "title": course.title}
            for course in sorted(current_user.enrolled_courses, key=lambda c: c.id)
        ],
        "total_points": sum(p.total_points for p in records),
        "progress_by_course": [
            {
                "course_id": p.course_id,
                "course_title": p.course.title if p.course else "Course",
                "completed_challenges": len(p.completed_challenges),
                "total_points": p.total_points,
                "current_level": p.current_level,
            }
            for p in records
        ]
    }


@router.get("/student/{student_id}")
async def student_analytics(
    student_id: int,
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Submission and progress analytics for one student.

    ``average_score`` is the mean of tests_passed / total_tests over all
    submissions, as a percentage.
    """
    student = db.query(User).filter(User.id == student_id).first()
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )

    submissions = db.query(Submission).filter(Submission.student_id == student_id).all()
    records = db.query(Progress).filter(
        Progress.student_id == student_id
    ).order_by(Progress.course_id).all()

    total = len(submissions)
    average_score = sum(s.score_ratio for s in submissions) / total * 100 if total else 0.0

    return {
        "student": UserResponse.model_validate(student),
        "total_submissions": total,
        "passed_submissions": sum(1 for s in submissions if s.passed),
        "average_score": round(average_score, 2),
        "progress": [progress_to_dict(p) for p in records]
    }
