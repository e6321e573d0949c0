"""
Assignments router for LearnSpace.

Teachers set a course challenge for enrolled students with a due date and
follow who has completed it, late or on time. Students see their own
assignments.
"""

from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session, selectinload

from learnspace.core.database import get_db
from learnspace.models.user import User
from learnspace.models.course import Course, Challenge
from learnspace.models.assignment import Assignment
from learnspace.models.audit import AuditLog, AuditAction
from learnspace.routers.auth import require_teacher, require_student, client_info
from learnspace.schemas.assignment import AssignmentCreate, AssignmentStatus
from learnspace.services.assignments import (
    latest_submissions,
    roster_statuses,
    summarize,
    student_view_status,
    export_csv
)
from learnspace.utils.dates import utcnow, to_naive_utc, isoformat


router = APIRouter()


def _teacher_assignments(db: Session, current_user: User) -> List[Assignment]:
    """Admins see every assignment; teachers see the ones they set."""
    query = db.query(Assignment).options(
        selectinload(Assignment.course),
        selectinload(Assignment.challenge),
        selectinload(Assignment.assigned_to)
    )
    if not current_user.is_admin:
        query = query.filter(Assignment.teacher_id == current_user.id)
    return query.order_by(Assignment.due_date, Assignment.id).all()


def _assignment_to_dict(assignment: Assignment) -> Dict[str, Any]:
    return {
        "id": assignment.id,
        "title": assignment.title,
        "description": assignment.description,
        "due_date": isoformat(assignment.due_date),
        "is_published": assignment.is_published,
        "course": {"id": assignment.course.id, "title": assignment.course.title},
        "challenge": {
            "id": assignment.challenge.id,
            "title": assignment.challenge.title,
            "difficulty": assignment.challenge.difficulty,
        },
        "assigned_to": [
            {"id": s.id, "first_name": s.first_name, "last_name": s.last_name, "email": s.email}
            for s in assignment.assigned_to
        ],
    }


@router.get("/teacher/options")
async def get_assignment_options(
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Courses the teacher can assign work in, with their challenges and roster.
    """
    query = db.query(Course).options(
        selectinload(Course.challenges),
        selectinload(Course.enrolled_students)
    )
    if not current_user.is_admin:
        query = query.filter(Course.instructor_id == current_user.id)

    courses = query.order_by(Course.id).all()

    return {
        "courses": [
            {
                "id": course.id,
                "title": course.title,
                "challenges": [{"id": c.id, "title": c.title} for c in course.challenges],
                "students": [
                    {"id": s.id, "name": s.full_name, "email": s.email}
                    for s in sorted(course.enrolled_students, key=lambda s: s.id)
                ],
            }
            for course in courses
        ]
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_data: AssignmentCreate,
    request: Request,
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Assign a challenge to enrolled students.

    ``assigned_to`` is narrowed to students enrolled in the course; when it is
    empty or omitted every enrolled student is assigned.
    """
    course = db.query(Course).filter(Course.id == assignment_data.course_id).first()
    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )

    challenge = db.query(Challenge).filter(Challenge.id == assignment_data.challenge_id).first()
    if not challenge or challenge.course_id != course.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Challenge is invalid for this course"
        )

    enrolled = {student.id: student for student in course.enrolled_students}
    if assignment_data.assigned_to:
        students = [enrolled[sid] for sid in dict.fromkeys(assignment_data.assigned_to) if sid in enrolled]
    else:
        students = [enrolled[sid] for sid in sorted(enrolled)]

    if not students:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid students available for this assignment"
        )

    assignment = Assignment(
        title=assignment_data.title,
        description=assignment_data.description,
        course_id=course.id,
        challenge_id=challenge.id,
        teacher_id=current_user.id,
        due_date=to_naive_utc(assignment_data.due_date),
        is_published=True,
        assigned_to=students
    )
    db.add(assignment)
    db.flush()

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.CREATE,
        entity_type="assignment",
        entity_id=assignment.id,
        details={"course_id": course.id, "challenge_id": challenge.id, "students": len(students)},
        **client_info(request)
    ))
    db.commit()
    db.refresh(assignment)

    return {
        "message": "Assignment created",
        "assignment": _assignment_to_dict(assignment)
    }


@router.get("/teacher")
async def list_teacher_assignments(
    status_filter: Optional[AssignmentStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Assignments with per-student completion status.

    ``status`` narrows each roster to students with that status.
    """
    assignments = _teacher_assignments(db, current_user)
    latest = latest_submissions(db, [a.id for a in assignments])
    now = utcnow()

    return {
        "assignments": [
            summarize(assignment, roster_statuses(assignment, latest, now), now, status_filter)
            for assignment in assignments
        ]
    }


@router.get("/teacher/export")
async def export_teacher_assignments(
    status_filter: Optional[AssignmentStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_teacher),
    db: Session = Depends(get_db)
) -> Response:
    """
    Per-student assignment statuses as a CSV download.
    """
    assignments = _teacher_assignments(db, current_user)
    latest = latest_submissions(db, [a.id for a in assignments])
    now = utcnow()

    rows = [
        (assignment, student)
        for assignment in assignments
        for student in roster_statuses(assignment, latest, now)
        if status_filter is None or student.status == status_filter
    ]

    filename = f"assignments-{now.strftime('%Y%m%d')}.csv"
    return Response(
        content=export_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/student")
async def list_student_assignments(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    The current student's published assignments.
    """
    assignments = db.query(Assignment).filter(
        Assignment.assigned_to.any(User.id == current_user.id),
        Assignment.is_published == True  # noqa: E712
    ).order_by(Assignment.due_date, Assignment.id).all()

    latest = latest_submissions(db, [a.id for a in assignments], student_id=current_user.id)
    now = utcnow()

    return {
        "assignments": [
            {
                "id": assignment.id,
                "title": assignment.title,
                "description": assignment.description,
                "due_date": isoformat(assignment.due_date),
                "course_id": assignment.course_id,
                "course_title": assignment.course.title if assignment.course else "Course",
                "challenge_id": assignment.challenge_id,
                "challenge_title": assignment.challenge.title if assignment.challenge else "Challenge",
                "status": student_view_status(
                    assignment, latest.get((assignment.id, current_user.id)), now
                ).value,
            }
            for assignment in assignments
        ]
    }
