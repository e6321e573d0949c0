"""
Authentication router for LearnSpace.

Handles user registration, login, logout and the current-user lookup, and
provides the authentication and role dependencies used by other routers.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy import or_

from learnspace.core.database import get_db
from learnspace.core.rate_limit import default_limiter
from learnspace.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    verify_token
)
from learnspace.core.config import settings
from learnspace.models.user import User, UserRole, DEFAULT_PREFERENCES
from learnspace.models.audit import AuditLog, AuditAction
from learnspace.schemas.auth import UserRegister, Token, RegisterResponse, UserResponse
from learnspace.utils.dates import utcnow


router = APIRouter()

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


# Dependencies
def get_token_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the user named by a JWT token, active or not.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token(token)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise credentials_exception

    user = db.query(User).filter(User.id == int(subject)).first()
    if user is None:
        raise credentials_exception

    return user


def get_current_user(user: User = Depends(get_token_user)) -> User:
    """
    Get current authenticated user from JWT token.
    """
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    """
    Teachers and admins only.
    """
    if not current_user.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )
    return current_user


def require_student(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )
    return current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )
    return current_user


def ensure_self_or_teacher(current_user: User, student_id: int) -> None:
    """Students may only see their own records; teachers and admins see everyone's."""
    if current_user.id != student_id and not current_user.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )


def issue_token(user: User) -> str:
    return create_access_token(user.id, role=user.role)


def client_info(request: Request) -> Dict[str, Any]:
    """Request metadata recorded on audit log entries."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


# Endpoints
@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(default_limiter)]
)
async def register(
    user_data: UserRegister,
    request: Request,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Register a new student or teacher account.
    """
    existing_user = db.query(User).filter(
        or_(
            User.email == user_data.email,
            User.username == user_data.username
        )
    ).first()

    if existing_user:
        if existing_user.email == user_data.email:
            detail = "Email already registered"
        else:
            detail = "Username already taken"
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        role=UserRole(user_data.role).value,
        grade=user_data.grade,
        school=user_data.school,
        preferences=dict(DEFAULT_PREFERENCES),
        is_active=True,
    )

    db.add(new_user)
    db.flush()

    db.add(AuditLog.log_action(
        user_id=new_user.id,
        action=AuditAction.REGISTER,
        entity_type="user",
        entity_id=new_user.id,
        details={"role": new_user.role},
        **client_info(request)
    ))
    db.commit()
    db.refresh(new_user)

    return {
        "message": "User registered successfully",
        "token": issue_token(new_user),
        "user": new_user
    }


@router.post("/login", response_model=Token, dependencies=[Depends(default_limiter)])
async def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    OAuth2 compatible login endpoint. ``username`` may be a username or an email.
    """
    user = db.query(User).filter(
        or_(
            User.email == form_data.username,
            User.username == form_data.username
        )
    ).first()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not verify_password(form_data.password, user.hashed_password):
        db.add(AuditLog.log_action(
            user_id=user.id,
            action=AuditAction.LOGIN,
            entity_type="user",
            entity_id=user.id,
            details={"action": "failed_login_attempt"},
            success=False,
            error_message="Invalid password",
            **client_info(request)
        ))
        db.commit()

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    user.last_login = utcnow()

    db.add(AuditLog.log_action(
        user_id=user.id,
        action=AuditAction.LOGIN,
        entity_type="user",
        entity_id=user.id,
        details={"action": "successful_login"},
        **client_info(request)
    ))
    db.commit()
    db.refresh(user)

    return {
        "message": "Login successful",
        "access_token": issue_token(user),
        "token_type": "bearer",
        "user": user
    }


@router.post("/logout")
async def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, str]:
    """
    Logout endpoint (mainly for logging purposes).
    """
    db.add(AuditLog.log_action(
        user_id=current_user.id,
        action=AuditAction.LOGOUT,
        entity_type="user",
        entity_id=current_user.id,
        **client_info(request)
    ))
    db.commit()

    return {"message": "Successfully logged out"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user information.
    """
    return current_user
