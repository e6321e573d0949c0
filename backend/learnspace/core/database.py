"""
Database configuration and session management for LearnSpace.

Sets up SQLAlchemy engine, session factory, and base model.
"""

from typing import Generator
from sqlalchemy import create_engine, MetaData, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from .config import settings


logger = logging.getLogger(__name__)


# Constraint names stay stable across SQLite and PostgreSQL
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Tests share one in-memory connection so every session sees the same data
if settings.TESTING:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif settings.DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=20,
        echo=settings.DEBUG,
    )


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base class for models
Base = declarative_base(metadata=metadata)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(db: Session) -> None:
    """
    Initialize database with required data.

    Creates the default admin user and the badge catalogue used by the
    automatic badge rules. Safe to call on every startup.

    Args:
        db: Database session
    """
    from learnspace.models.user import User, UserRole
    from learnspace.models.badge import Badge
    from learnspace.core.security import get_password_hash
    from learnspace.services.badges import DEFAULT_BADGES

    admin_user = db.query(User).filter(
        User.email == settings.FIRST_ADMIN_EMAIL
    ).first()

    if not admin_user:
        admin_user = User(
            email=settings.FIRST_ADMIN_EMAIL,
            username=settings.FIRST_ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            first_name="Site",
            last_name="Admin",
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        db.add(admin_user)
        logger.info(f"Admin user created: {settings.FIRST_ADMIN_EMAIL}")

    existing = {name for (name,) in db.query(Badge.name).all()}
    for rule in DEFAULT_BADGES:
        if rule.name in existing:
            continue
        db.add(Badge(
            name=rule.name,
            description=rule.description,
            icon=rule.icon,
            category=rule.category,
            required_points=rule.required_points,
            required_challenges=rule.required_challenges,
        ))

    db.commit()


def check_database_connection() -> bool:
    """True when a trivial query succeeds. Backs the health endpoint."""
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


def create_all_tables() -> None:
    import learnspace.models  # noqa: F401  register models with metadata

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def drop_all_tables() -> None:
    """Drop every table. Used by the test suite between tests."""
    Base.metadata.drop_all(bind=engine)
