"""Shared fixtures for the LearnSpace test suite.

Settings are read at import time, so the environment is prepared before any
``learnspace`` module is imported: an in-memory database, rate limiting off,
and the test interpreter standing in for ``python3``.
"""

import os
import shutil
import sys

os.environ["TESTING"] = "True"
os.environ["RATE_LIMIT_ENABLED"] = "False"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PYTHON_BINARY"] = sys.executable

import pytest
from fastapi.testclient import TestClient

from learnspace.core.database import SessionLocal, create_all_tables, drop_all_tables, init_db
from learnspace.core.config import settings
from learnspace.core.security import get_password_hash
from learnspace.execution.sandbox import CodeExecutor, get_executor
from learnspace.main import create_app
from learnspace.models import Challenge, Course, User
from learnspace.routers.auth import issue_token


PASSWORD = "secret123"

requires_node = pytest.mark.skipif(shutil.which("node") is None, reason="Node.js is not installed")

# Hashing is slow; every fixture user shares one hash
_PASSWORD_HASH = get_password_hash(PASSWORD)


def create_user(db, username, role="student", **fields):
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=_PASSWORD_HASH,
        first_name=fields.pop("first_name", username.capitalize()),
        last_name=fields.pop("last_name", "Tester"),
        role=role,
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def db():
    """Fresh schema with the seeded admin and badge catalogue."""
    create_all_tables()
    session = SessionLocal()
    init_db(session)
    try:
        yield session
    finally:
        session.close()
        drop_all_tables()


@pytest.fixture
def executor():
    return CodeExecutor(python_binary=sys.executable, python_timeout_ms=2000)


@pytest.fixture
def client(db, executor):
    app = create_app()
    app.dependency_overrides[get_executor] = lambda: executor
    return TestClient(app)


@pytest.fixture
def student(db):
    return create_user(db, "alice", grade=6)


@pytest.fixture
def other_student(db):
    return create_user(db, "bob", grade=6)


@pytest.fixture
def teacher(db):
    return create_user(db, "tina", role="teacher")


@pytest.fixture
def admin(db):
    return db.query(User).filter(User.email == settings.FIRST_ADMIN_EMAIL).one()


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


@pytest.fixture
def teacher_headers(teacher):
    return auth_headers(teacher)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def course(db, teacher):
    course = Course(
        title="Python Basics",
        description="First steps in Python",
        instructor_id=teacher.id,
        target_grades=[5, 6],
        difficulty="beginner",
        topics=["variables", "loops"],
        is_published=True,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def challenge(db, course):
    """Doubles a number read from stdin."""
    challenge = Challenge(
        title="Double It",
        description="Read a number and print twice its value",
        course_id=course.id,
        language="python",
        test_cases=[
            {"input": "3\n", "expected_output": "6", "description": "small"},
            {"input": "21\n", "expected_output": "42", "description": "answer"},
        ],
        gamification_points=100,
    )
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    return challenge


@pytest.fixture
def enrolled(db, course, student):
    course.enrolled_students.append(student)
    db.commit()
    return student
