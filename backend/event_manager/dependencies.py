"""Request-scoped identity.

``get_current_user`` resolves the bearer token to a ``User`` row and hands it
to the route explicitly; nothing is stored on shared state.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from event_manager.database import get_db
from event_manager.models.user import User
from event_manager.security import SESSION, decode_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        logger.warning("Unauthorized access: no token provided")
        raise _unauthorized("Not authorized, no token")

    user_id = decode_token(credentials.credentials, SESSION)
    if user_id is None:
        logger.warning("Unauthorized access: invalid token")
        raise _unauthorized("Not authorized, invalid token")

    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise _unauthorized("User not found")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Identity for public routes: anonymous when the token is absent or bad."""
    if credentials is None:
        return None
    user_id = decode_token(credentials.credentials, SESSION)
    if user_id is None:
        return None
    return db.query(User).filter(User.user_id == user_id).first()


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning("Unauthorized admin action attempted by user: %s", current_user.user_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Admins only.")
    return current_user
