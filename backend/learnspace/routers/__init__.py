"""
API routers for LearnSpace.

This module contains all API endpoint routers:
- auth: Authentication endpoints (register, login, logout, me)
- users: Profiles and the admin user list
- courses / challenges: Learning content and enrollment
- submissions / progress / badges: Grading and gamification
- assignments / dashboard: Teacher-set work and summaries
- execute / blocks: Sandboxed code execution and the block editor
- privacy: GDPR data access, export, deletion and consent
- health: Liveness check
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .users import router as users_router
from .courses import router as courses_router
from .challenges import router as challenges_router
from .submissions import router as submissions_router
from .progress import router as progress_router
from .badges import router as badges_router
from .assignments import router as assignments_router
from .dashboard import router as dashboard_router
from .execute import router as execute_router
from .blocks import router as blocks_router
from .privacy import router as privacy_router
from .health import router as health_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(courses_router, prefix="/courses", tags=["courses"])
api_router.include_router(challenges_router, prefix="/challenges", tags=["challenges"])
api_router.include_router(submissions_router, prefix="/submissions", tags=["submissions"])
api_router.include_router(progress_router, prefix="/progress", tags=["progress"])
api_router.include_router(badges_router, prefix="/badges", tags=["badges"])
api_router.include_router(assignments_router, prefix="/assignments", tags=["assignments"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(execute_router, prefix="/execute", tags=["execution"])
api_router.include_router(blocks_router, prefix="/blocks", tags=["blocks"])
api_router.include_router(privacy_router, prefix="/privacy", tags=["privacy"])
api_router.include_router(health_router, tags=["health"])

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "users_router",
    "courses_router",
    "challenges_router",
    "submissions_router",
    "progress_router",
    "badges_router",
    "assignments_router",
    "dashboard_router",
    "execute_router",
    "blocks_router",
    "privacy_router",
    "health_router"
]
