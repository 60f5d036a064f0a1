"""Auth Routes — registration, login, and profile.

Invariants:
    - Duplicate email → 409; unknown email and wrong password share one 401 message
    - Deactivated account → 403 on login
    - Token subject is the user id; lifetime from Settings.jwt_expires_minutes
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.config import get_settings
from app.core.errors import (
    AuthenticationError, EmailAlreadyRegisteredError, InactiveAccountError,
)
from app.infrastructure.database import get_db
from app.infrastructure.security import (
    create_access_token, hash_password, verify_password,
)
from app.models.user import User
from app.schemas.auth import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_active=user.is_active,
        created_at=user.created_at,
    )


def _auth_response(user: User) -> AuthResponse:
    settings = get_settings()
    token = create_access_token(
        str(user.id), settings.jwt_secret, settings.jwt_algorithm,
        settings.jwt_expires_minutes,
    )
    return AuthResponse(user=_user_response(user), token=token)


@router.post(
    "/register", response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest, db: AsyncSession = Depends(get_db),
):
    """Create an account and return it with an access token."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise EmailAlreadyRegisteredError(body.email)

    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User registered", extra={"user_id": str(user.id)})
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange email + password for an access token."""
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(body.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise InactiveAccountError()
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return _auth_response(user)


@router.get("/profile", response_model=UserResponse)
async def profile(current_user: User = Depends(get_current_user)):
    """Current account."""
    return _user_response(current_user)
