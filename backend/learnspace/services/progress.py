"""
Progress helpers for LearnSpace.
"""

from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from learnspace.models.progress import Progress
from learnspace.utils.dates import isoformat, utcnow


def get_progress(db: Session, student_id: int, course_id: int) -> Optional[Progress]:
    return db.query(Progress).filter(
        Progress.student_id == student_id,
        Progress.course_id == course_id
    ).first()


def get_or_create_progress(db: Session, student_id: int, course_id: int) -> Progress:
    """Fetch the student's progress in a course, creating an empty record if needed."""
    progress = get_progress(db, student_id, course_id)
    if progress is None:
        progress = Progress(
            student_id=student_id,
            course_id=course_id,
            total_points=0,
            current_level=1,
            experience_points=0,
            last_activity_at=utcnow(),
        )
        db.add(progress)
        db.flush()
    return progress


def progress_to_dict(progress: Progress) -> Dict[str, Any]:
    return {
        "id": progress.id,
        "student_id": progress.student_id,
        "course_id": progress.course_id,
        "total_points": progress.total_points,
        "current_level": progress.current_level,
        "experience_points": progress.experience_points,
        "average_score": progress.average_score,
        "learning_path": progress.learning_path,
        "completed_challenges": [
            {
                "challenge_id": c.challenge_id,
                "title": c.challenge.title if c.challenge else None,
                "completed_at": isoformat(c.completed_at),
                "points_earned": c.points_earned,
            }
            for c in progress.completed_challenges
        ],
        "badges": [badge_to_dict(b) for b in progress.badges],
        "last_activity_at": isoformat(progress.last_activity_at),
    }


def badge_to_dict(badge) -> Dict[str, Any]:
    return {
        "name": badge.name,
        "description": badge.description,
        "earned_at": isoformat(badge.earned_at),
    }
