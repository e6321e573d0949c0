"""
Assignment status tracking for LearnSpace.

A student's status on an assignment comes from their latest submission for
it: passed before the due date is ``completed``, passed after it is
``completed_late``, otherwise ``missing`` once the due date has passed and
``pending`` before that.
"""

import csv
import io
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from learnspace.models.assignment import Assignment
from learnspace.models.submission import Submission
from learnspace.schemas.assignment import AssignmentStatus, StudentAssignmentStatus
from learnspace.utils.dates import isoformat


# Names shown per assignment in the pending / missing previews
PREVIEW_NAMES = 5

CSV_COLUMNS = (
    "assignment_id",
    "assignment_title",
    "course_title",
    "challenge_title",
    "due_date",
    "student_id",
    "student_name",
    "student_email",
    "status",
    "submitted_at",
)


@dataclass
class StudentStatus:
    student_id: int
    name: str
    email: str
    status: AssignmentStatus
    submitted_at: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "email": self.email,
            "status": self.status.value,
            "submitted_at": isoformat(self.submitted_at),
        }


def latest_submissions(
    db: Session,
    assignment_ids: Sequence[int],
    student_id: Optional[int] = None,
) -> Dict[Tuple[int, int], Submission]:
    """Most recent submission per (assignment, student) pair."""
    if not assignment_ids:
        return {}

    query = db.query(Submission).filter(Submission.assignment_id.in_(assignment_ids))
    if student_id is not None:
        query = query.filter(Submission.student_id == student_id)

    latest: Dict[Tuple[int, int], Submission] = {}
    for submission in query.all():
        key = (submission.assignment_id, submission.student_id)
        existing = latest.get(key)
        if existing is None or submission.submitted_at > existing.submitted_at:
            latest[key] = submission
    return latest


def student_status(assignment: Assignment, latest: Optional[Submission], now: datetime) -> AssignmentStatus:
    passed = latest is not None and latest.passed
    if passed and latest.submitted_at > assignment.due_date:
        return AssignmentStatus.COMPLETED_LATE
    if passed:
        return AssignmentStatus.COMPLETED
    if assignment.due_date < now:
        return AssignmentStatus.MISSING
    return AssignmentStatus.PENDING


def student_view_status(assignment: Assignment, latest: Optional[Submission], now: datetime) -> StudentAssignmentStatus:
    if latest is not None and latest.passed:
        return StudentAssignmentStatus.COMPLETED
    if assignment.due_date < now:
        return StudentAssignmentStatus.OVERDUE
    return StudentAssignmentStatus.PENDING


def roster_statuses(
    assignment: Assignment,
    latest: Dict[Tuple[int, int], Submission],
    now: datetime,
) -> List[StudentStatus]:
    statuses = []
    for student in assignment.assigned_to:
        submission = latest.get((assignment.id, student.id))
        statuses.append(StudentStatus(
            student_id=student.id,
            name=student.full_name,
            email=student.email,
            status=student_status(assignment, submission, now),
            submitted_at=submission.submitted_at if submission else None,
        ))
    return statuses


def summarize(
    assignment: Assignment,
    statuses: List[StudentStatus],
    now: datetime,
    status_filter: Optional[AssignmentStatus] = None,
) -> Dict[str, Any]:
    """
    Teacher-facing summary of one assignment.

    Counts always cover the whole roster; ``status_filter`` only narrows the
    ``student_statuses`` list that is returned.
    """
    assigned_count = len(statuses)
    submitted = [s for s in statuses if s.status in (AssignmentStatus.COMPLETED, AssignmentStatus.COMPLETED_LATE)]
    late = [s for s in statuses if s.status == AssignmentStatus.COMPLETED_LATE]
    missing = [s for s in statuses if s.status == AssignmentStatus.MISSING]
    pending = [s for s in statuses if s.status == AssignmentStatus.PENDING]

    shown = statuses if status_filter is None else [s for s in statuses if s.status == status_filter]

    return {
        "id": assignment.id,
        "title": assignment.title,
        "description": assignment.description,
        "due_date": isoformat(assignment.due_date),
        "course_id": assignment.course_id,
        "course_title": assignment.course.title if assignment.course else "Course",
        "challenge_id": assignment.challenge_id,
        "challenge_title": assignment.challenge.title if assignment.challenge else "Challenge",
        "assigned_count": assigned_count,
        "submitted_count": len(submitted),
        "late_count": len(late),
        "missing_count": len(missing),
        "pending_count": max(assigned_count - len(submitted), 0),
        "pending_student_names": [s.name for s in pending[:PREVIEW_NAMES]],
        "missing_student_names": [s.name for s in missing[:PREVIEW_NAMES]],
        "is_overdue": assignment.due_date < now,
        "student_statuses": [s.to_dict() for s in shown],
    }


def export_csv(rows: Iterable[Tuple[Assignment, StudentStatus]]) -> str:
    """Render (assignment, student status) pairs as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for assignment, status in rows:
        writer.writerow([
            assignment.id,
            assignment.title,
            assignment.course.title if assignment.course else "",
            assignment.challenge.title if assignment.challenge else "",
            isoformat(assignment.due_date),
            status.student_id,
            status.name,
            status.email,
            status.status.value,
            isoformat(status.submitted_at) or "",
        ])
    return buffer.getvalue()
