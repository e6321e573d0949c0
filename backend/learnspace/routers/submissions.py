"""
Submissions router for LearnSpace.

Accepts challenge submissions, grades them in the sandbox, and awards
points and badges on a challenge's first pass.
"""

import logging
from typing import List, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from learnspace.core.database import get_db
from learnspace.execution.blocks import transpile
from learnspace.execution.sandbox import CodeExecutor, get_executor
from learnspace.models.user import User
from learnspace.models.course import Challenge
from learnspace.models.assignment import Assignment
from learnspace.models.submission import Submission, SubmissionLanguage
from learnspace.routers.auth import get_current_user, ensure_self_or_teacher
from learnspace.schemas.blocks import to_blocks
from learnspace.schemas.submission import SubmissionCreate
from learnspace.services.badges import check_badges
from learnspace.services.grading import grade
from learnspace.services.progress import get_or_create_progress
from learnspace.utils.dates import utcnow


logger = logging.getLogger(__name__)

router = APIRouter()


def _resolve_source(submission: SubmissionCreate, challenge: Challenge):
    """
    Source text and run language for a submission.

    Blockly programs are transpiled into the challenge's language.
    """
    if submission.language != SubmissionLanguage.BLOCKLY:
        return submission.code, submission.language.value

    run_language = challenge.language or SubmissionLanguage.PYTHON.value
    try:
        blocks = to_blocks(submission.blocks or [], run_language)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return transpile(blocks), run_language


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_submission(
    submission_data: SubmissionCreate,
    current_user: User = Depends(get_current_user),
    executor: CodeExecutor = Depends(get_executor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Submit and grade code for a challenge.
    """
    challenge = db.query(Challenge).filter(Challenge.id == submission_data.challenge_id).first()
    if not challenge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Challenge not found"
        )

    if submission_data.assignment_id is not None:
        assignment = db.query(Assignment).filter(Assignment.id == submission_data.assignment_id).first()
        if not assignment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Assignment not found"
            )
        if assignment.challenge_id != challenge.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Challenge does not match the assignment"
            )
        if not any(student.id == current_user.id for student in assignment.assigned_to):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Assignment is not assigned to you"
            )

    code, run_language = _resolve_source(submission_data, challenge)

    previous_attempts = db.query(Submission).filter(
        Submission.student_id == current_user.id,
        Submission.challenge_id == challenge.id
    ).count()

    report = await run_in_threadpool(grade, executor, challenge, code, run_language)

    now = utcnow()
    submission = Submission(
        student_id=current_user.id,
        challenge_id=challenge.id,
        course_id=challenge.course_id,
        assignment_id=submission_data.assignment_id,
        code=code,
        language=submission_data.language.value,
        result=report.result.value,
        tests_passed=report.tests_passed,
        total_tests=report.total_tests,
        feedback=report.feedback,
        execution_time=report.execution_time,
        time_spent=submission_data.time_spent,
        attempts=previous_attempts + 1,
        is_first_attempt=previous_attempts == 0,
        submitted_at=now,
        completed_at=now if report.passed else None,
    )
    db.add(submission)

    new_badges: List[str] = []
    if report.passed:
        progress = get_or_create_progress(db, current_user.id, challenge.course_id)
        points = challenge.gamification_points or 0
        if progress.record_completion(challenge.id, points):
            submission.points_earned = points
            current_user.points = (current_user.points or 0) + points
            new_badges = check_badges(progress)

    db.commit()
    db.refresh(submission)

    logger.info(
        f"Submission {submission.id} by user {current_user.id} for challenge {challenge.id}: "
        f"{submission.result} ({submission.tests_passed}/{submission.total_tests})"
    )

    return {
        "message": "Submission graded",
        "submission": submission.to_dict(),
        "new_badges": new_badges
    }


@router.get("/student/{student_id}")
async def list_student_submissions(
    student_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    ensure_self_or_teacher(current_user, student_id)

    submissions = db.query(Submission).filter(
        Submission.student_id == student_id
    ).order_by(Submission.submitted_at.desc(), Submission.id.desc()).all()

    return [submission.to_dict() for submission in submissions]


@router.get("/{submission_id}")
async def get_submission(
    submission_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    submission = db.query(Submission).filter(Submission.id == submission_id).first()

    if not submission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found"
        )

    ensure_self_or_teacher(current_user, submission.student_id)
    return submission.to_dict()
