"""
Privacy router for LearnSpace.

GDPR endpoints: access to stored data, data export, scheduled account
deletion with a grace period, and consent preferences.
"""

import logging
from datetime import timedelta
from typing import Dict, Any
from fastapi import APIRouter, Depends, status, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from learnspace.core.config import settings
from learnspace.core.database import get_db
from learnspace.core.errors import AppError
from learnspace.models.user import User
from learnspace.models.progress import Progress
from learnspace.models.submission import Submission
from learnspace.models.audit import AuditLog, AuditAction
from learnspace.routers.auth import get_current_user, get_token_user, client_info
from learnspace.schemas.privacy import ConsentUpdate
from learnspace.services.progress import badge_to_dict
from learnspace.utils.dates import utcnow, isoformat


logger = logging.getLogger(__name__)

router = APIRouter()


PRIVACY_POLICY: Dict[str, Any] = {
    "version": "1.0",
    "last_updated": "2025-01-15",
    "effective_date": "2025-01-15",
    "organization": "LearnSpace",
    "contact": {
        "email": "privacy@learnspace.local",
        "website": "learnspace.local",
    },
    "sections": {
        "introduction": {
            "title": "Introduction",
            "content": "This Privacy Policy explains how we collect, use, disclose, and safeguard your information.",
        },
        "data_collection": {
            "title": "Data We Collect",
            "categories": [
                "Account Information: email, name, role, password hash",
                "Educational Data: courses enrolled, challenges submitted, test results",
                "Usage Data: login timestamps, feature interaction logs",
                "Device Data: IP address, browser type (optional analytics)",
            ],
        },
        "lawful_basis": {
            "title": "Lawful Basis for Processing (GDPR Article 6)",
            "bases": [
                "Contract: Processing necessary to provide educational services",
                "Consent: Optional analytics and marketing communications",
                "Legitimate Interest: Platform security and improvement",
                "Legal Obligation: Data retention for educational records",
            ],
        },
        "data_retention": {
            "title": "Data Retention",
            "policy": {
                "active_accounts": "Retained while account is active",
                "deleted_accounts": "Deleted within 30 days of deletion request (Article 17)",
                "educational_records": "Retained for 7 years per school retention policy",
                "logs": "Retained for 90 days for security purposes",
            },
        },
        "user_rights": {
            "title": "Your GDPR Rights",
            "rights": [
                "Right of Access (Article 15): Request copy of your data",
                "Right to Rectification (Article 16): Correct inaccurate data",
                "Right to Erasure (Article 17): Request data deletion",
                "Right to Data Portability (Article 20): Download data in machine-readable format",
                "Right to Object (Article 21): Opt-out of non-essential processing",
            ],
        },
        "security_measures": {
            "title": "Security Measures",
            "measures": [
                "Password hashing with bcrypt",
                "JWT-based authentication",
                "Rate limiting to prevent brute force attacks",
                "Student code runs in isolated, time-limited processes",
            ],
        },
        "third_parties": {
            "title": "Third-Party Sharing",
            "policy": "We do not sell or share personal data with third parties without explicit consent.",
        },
    },
}


def _earned_badges(db: Session, user: User):
    records = db.query(Progress).filter(Progress.student_id == user.id).all()
    return [
        {**badge_to_dict(badge), "course_id": record.course_id}
        for record in records
        for badge in record.badges
    ]


def _course_summary(course) -> Dict[str, Any]:
    return {"id": course.id, "title": course.title}


@router.get("/profile")
async def get_privacy_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Everything currently stored about the user, in summary.
    """
    return {
        "success": True,
        "data": {
            "personal_data": {
                "id": current_user.id,
                "email": current_user.email,
                "name": current_user.full_name,
                "role": current_user.role,
                "created_at": isoformat(current_user.created_at),
                "last_login": isoformat(current_user.last_login),
            },
            "enrollments": [_course_summary(c) for c in current_user.enrolled_courses],
            "teaching_courses": [_course_summary(c) for c in current_user.teaching_courses],
            "points": current_user.points,
            "badges": _earned_badges(db, current_user),
            "privacy_consent": current_user.privacy_consent,
        },
        "timestamp": isoformat(utcnow()),
    }


@router.post("/export")
async def export_user_data(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> JSONResponse:
    """
    Download all user data as a JSON attachment (GDPR Article 20).
    """
    now = utcnow()
    submissions = db.query(Submission).filter(
        Submission.student_id == current_user.id
    ).order_by(Submission.submitted_at).all()

    export_data = {
        "export_date": isoformat(now),
        "expiry_date": isoformat(now + timedelta(days=settings.EXPORT_EXPIRY_DAYS)),
        "user": current_user.to_dict(),
        "enrolled_courses": [_course_summary(c) for c in current_user.enrolled_courses],
        "teaching_courses": [_course_summary(c) for c in current_user.teaching_courses],
        "submissions": [s.to_dict() for s in submissions],
        "badges": _earned_badges(db, current_user),
        "privacy_consent": current_user.privacy_consent,
    }

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.EXPORT,
        entity_type="user",
        entity_id=current_user.id,
        **client_info(request)
    ))
    db.commit()

    filename = f"user-data-{current_user.id}-{now.strftime('%Y%m%d%H%M%S')}.json"
    return JSONResponse(
        content=jsonable_encoder(export_data),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/delete-request")
async def request_account_deletion(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Schedule account deletion after the grace period and deactivate the account.
    """
    days = settings.DELETION_GRACE_PERIOD_DAYS
    deletion_date = current_user.schedule_deletion(days)

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.DELETION_REQUEST,
        entity_type="user",
        entity_id=current_user.id,
        details={"scheduled_for": isoformat(deletion_date)},
        **client_info(request)
    ))
    db.commit()

    logger.info(f"User {current_user.id} scheduled for deletion on {deletion_date:%Y-%m-%d}")

    return {
        "success": True,
        "message": (
            f"Your account has been scheduled for deletion. "
            f"You have {days} days to cancel this request."
        ),
        "deletion_date": isoformat(deletion_date),
        "cancellation_window": f"{days} days",
        "cancel_url": f"{settings.API_V1_STR}/privacy/cancel-deletion",
    }


@router.post("/cancel-deletion")
async def cancel_account_deletion(
    request: Request,
    current_user: User = Depends(get_token_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Cancel a scheduled deletion and reactivate the account.

    Accepts tokens of deactivated accounts, since requesting deletion
    deactivates the account.
    """
    if current_user.deletion_scheduled_for is None:
        raise AppError("No deletion request in progress", status.HTTP_400_BAD_REQUEST)

    current_user.cancel_deletion()
    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.DELETION_CANCEL,
        entity_type="user",
        entity_id=current_user.id,
        **client_info(request)
    ))
    db.commit()

    return {
        "success": True,
        "message": "Account deletion has been cancelled. Your account is now active.",
    }


@router.post("/consent")
async def update_consent(
    consent: ConsentUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Update privacy consent preferences (GDPR Article 6(1)(a)).
    """
    current_user.marketing_emails = consent.marketing_emails
    current_user.analytics_tracking = consent.analytics_tracking
    current_user.third_party_sharing = consent.third_party_sharing
    current_user.consent_updated_at = utcnow()

    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.CONSENT_CHANGE,
        entity_type="user",
        entity_id=current_user.id,
        details=consent.model_dump(),
        **client_info(request)
    ))
    db.commit()

    logger.info(f"User {current_user.id} updated privacy consent: {consent.model_dump()}")

    return {
        "success": True,
        "message": "Privacy preferences updated successfully",
        "consent": current_user.privacy_consent,
    }


@router.get("/policy")
async def get_privacy_policy() -> Dict[str, Any]:
    return PRIVACY_POLICY
