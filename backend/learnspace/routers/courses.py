"""
Courses router for LearnSpace.

Handles browsing published courses, course creation by teachers,
and student enrollment.
"""

from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session, selectinload

from learnspace.core.database import get_db
from learnspace.models.user import User
from learnspace.models.course import Course, DifficultyLevel
from learnspace.models.audit import AuditLog, AuditAction
from learnspace.routers.auth import require_teacher, require_student, client_info
from learnspace.schemas.course import CourseCreate


router = APIRouter()


@router.get("/")
async def list_courses(
    difficulty: Optional[DifficultyLevel] = None,
    target_grade: Optional[int] = None,
    db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    """
    List all published courses with optional filtering.
    """
    query = db.query(Course).options(
        selectinload(Course.instructor),
        selectinload(Course.challenges),
        selectinload(Course.enrolled_students)
    ).filter(Course.is_published == True)  # noqa: E712

    if difficulty:
        query = query.filter(Course.difficulty == difficulty.value)

    courses = query.order_by(Course.created_at.desc(), Course.id.desc()).all()

    # target_grades is a JSON list, filtered here so SQLite and PostgreSQL agree
    if target_grade is not None:
        courses = [c for c in courses if c.targets_grade(target_grade)]

    return [course.to_dict() for course in courses]


@router.get("/{course_id}")
async def get_course(
    course_id: int,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get a course with its instructor and challenges.
    """
    course = db.query(Course).filter(Course.id == course_id).first()

    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )

    return course.to_dict(include_challenges=True)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_course(
    course_data: CourseCreate,
    request: Request,
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Create a course owned by the current teacher.
    """
    course = Course(
        title=course_data.title,
        description=course_data.description,
        image=course_data.image,
        instructor_id=current_user.id,
        target_grades=course_data.target_grades,
        difficulty=course_data.difficulty.value,
        topics=course_data.topics,
        lessons=[lesson.model_dump() for lesson in course_data.lessons],
        is_published=course_data.is_published
    )
    db.add(course)
    db.flush()

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.CREATE,
        entity_type="course",
        entity_id=course.id,
        details={"title": course.title},
        **client_info(request)
    ))
    db.commit()
    db.refresh(course)

    return {
        "message": "Course created successfully",
        "course": course.to_dict()
    }


@router.post("/{course_id}/enroll")
async def enroll_in_course(
    course_id: int,
    request: Request,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Enroll the current student in a course. Enrolling twice is a no-op.
    """
    course = db.query(Course).filter(Course.id == course_id).first()

    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )

    if course.is_enrolled(current_user.id):
        return {
            "message": "Already enrolled in this course",
            "course": course.to_dict()
        }

    course.enrolled_students.append(current_user)
    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.ENROLL,
        entity_type="course",
        entity_id=course.id,
        **client_info(request)
    ))
    db.commit()
    db.refresh(course)

    return {
        "message": "Enrolled successfully",
        "course": course.to_dict()
    }
