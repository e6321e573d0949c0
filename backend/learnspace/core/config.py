"""
Configuration settings for the LearnSpace backend.

Uses Pydantic settings management for environment variables and configuration.
"""

from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl, field_validator
import secrets


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "LearnSpace"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Interactive learning environment with block-based coding challenges"

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Database
    DATABASE_URL: str = "sqlite:///./learnspace.db"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str] | str:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Admin settings
    FIRST_ADMIN_EMAIL: str = "admin@learnspace.local"
    FIRST_ADMIN_PASSWORD: str = "admin123"
    FIRST_ADMIN_USERNAME: str = "admin"

    # Gamification
    DEFAULT_CHALLENGE_POINTS: int = 100
    POINTS_PER_LEVEL: int = 100

    # Code execution
    JS_TIMEOUT_MS: int = 1200
    PYTHON_TIMEOUT_MS: int = 2000
    NODE_BINARY: str = "node"
    PYTHON_BINARY: str = "python3"
    EXECUTION_MEMORY_LIMIT_MB: int = 256
    EXECUTION_MAX_OUTPUT_CHARS: int = 64 * 1024
    EXECUTION_MAX_CONCURRENCY: int = 4

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 30
    RATE_LIMIT_MAX_CLIENTS: int = 10_000

    # Privacy
    DELETION_GRACE_PERIOD_DAYS: int = 30
    EXPORT_EXPIRY_DAYS: int = 30

    # Development settings
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


# Create global settings instance
settings = Settings()
