"""
Core services shared by every LearnSpace router: settings, the database
session, password hashing and tokens, error handlers and rate limiting.
"""

from .config import settings
from .database import get_db, engine, SessionLocal
from .errors import AppError
from .rate_limit import RateLimiter, default_limiter
from .security import (
    create_access_token,
    verify_password,
    get_password_hash,
    verify_token
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "AppError",
    "RateLimiter",
    "default_limiter",
    "create_access_token",
    "verify_password",
    "get_password_hash",
    "verify_token"
]
