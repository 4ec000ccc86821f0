"""Password hashing and signed tokens.

Three kinds of token are issued, all HS256 JWTs carrying the user id in
``sub``.  The ``purpose`` claim keeps them apart so a password-reset link can
never be replayed as a session, and vice versa.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import HTTPException, status

from event_manager.config import settings

logger = logging.getLogger(__name__)

SESSION = "session"
VERIFY_EMAIL = "verify_email"
RESET_PASSWORD = "reset_password"

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def _lifetime(purpose: str) -> timedelta:
    if purpose == SESSION:
        return timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS)
    if purpose == VERIFY_EMAIL:
        return timedelta(hours=settings.EMAIL_VERIFY_EXPIRE_HOURS)
    if purpose == RESET_PASSWORD:
        return timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    raise ValueError(f"Unknown token purpose: {purpose}")


def create_token(user_id: str, purpose: str = SESSION, expires_in: Optional[timedelta] = None) -> str:
    """Sign a token for ``user_id`` valid for the purpose's lifetime."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "purpose": purpose,
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else _lifetime(purpose)),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, purpose: str) -> Optional[str]:
    """Return the user id embedded in ``token``, or None if it is invalid,
    expired or was issued for another purpose."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired %s token", purpose)
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("purpose") != purpose:
        return None
    sub = payload.get("sub")
    return sub if isinstance(sub, str) else None


def require_token(token: str, purpose: str) -> str:
    """Like ``decode_token`` but raises 400 for link-style tokens."""
    user_id = decode_token(token, purpose)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")
    return user_id
