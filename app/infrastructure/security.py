"""Credential Security — bcrypt password hashing and HS256 JWT access tokens.

Invariants:
    - Plain passwords never stored or logged; only bcrypt hashes persist
    - Tokens carry `sub` (user id as str) and `exp`; anything else is ignored
    - decode_access_token never raises: invalid/expired/tampered → None

Design Decisions:
    - passlib CryptContext: hash scheme can be rotated without touching callers
    - Secret/algorithm passed explicitly (from Settings) — no module-level env reads
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: str, secret: str, algorithm: str = "HS256",
    expires_minutes: int = 60,
) -> str:
    """Create a signed JWT for subject that expires after expires_minutes."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(
        {"sub": subject, "exp": expire}, secret, algorithm=algorithm,
    )


def decode_access_token(
    token: str, secret: str, algorithm: str = "HS256",
) -> str | None:
    """Return the token subject, or None if the token is not acceptable."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None
    subject = payload.get("sub")
    return subject if isinstance(subject, str) and subject else None
