"""
Health check router for LearnSpace.
"""

from typing import Dict, Any
from fastapi import APIRouter

from learnspace.core.config import settings
from learnspace.core.database import check_database_connection
from learnspace.utils.dates import isoformat, utcnow


router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    return {
        "status": "ok",
        "version": settings.VERSION,
        "database": "ok" if check_database_connection() else "unavailable",
        "timestamp": isoformat(utcnow()),
    }
