"""Route Dependencies — authentication and service injection for FastAPI handlers.

Invariants:
    - get_current_user: bearer token REQUIRED, else AuthenticationError (401)
    - get_optional_user: no token → None (anonymous scope); a token that is sent
      but invalid/expired is still rejected with 401
    - Deactivated accounts are rejected with InactiveAccountError (403)
    - get_schedule_extractor returns the instance built in the lifespan, never builds one

Design Decisions:
    - HTTPBearer(auto_error=False): missing-token handling stays in our error envelope
      instead of FastAPI's default 403
"""

import logging
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import AuthenticationError, InactiveAccountError
from app.infrastructure.database import get_db
from app.infrastructure.security import decode_access_token
from app.models.user import User
from app.services.schedule_extractor import ScheduleExtractor

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def _user_from_token(token: str, db: AsyncSession) -> User:
    settings = get_settings()
    subject = decode_access_token(
        token, settings.jwt_secret, settings.jwt_algorithm,
    )
    if subject is None:
        raise AuthenticationError("Invalid or expired token")
    try:
        user_id = UUID(subject)
    except ValueError:
        raise AuthenticationError("Invalid or expired token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    if not user.is_active:
        raise InactiveAccountError()
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Authenticated user for protected routes."""
    if credentials is None:
        raise AuthenticationError("Access token is required")
    return await _user_from_token(credentials.credentials, db)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Authenticated user when a token is sent, None for anonymous callers."""
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, db)


def get_schedule_extractor(request: Request) -> ScheduleExtractor:
    """Extractor constructed once at startup (see main.lifespan)."""
    extractor = getattr(request.app.state, "schedule_extractor", None)
    if extractor is None:
        raise RuntimeError("Schedule extractor not initialized")
    return extractor
