"""Identity & access — registration, email verification, login, password reset
and self-service profile changes.

Every function takes the request's session explicitly and raises
``HTTPException`` with the status the route should return.  Emails are never
sent inline: they are queued on ``background_tasks`` after the commit.
"""
import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_manager.config import settings
from event_manager.models.user import User, UserRole
from event_manager.security import (
    RESET_PASSWORD,
    SESSION,
    VERIFY_EMAIL,
    create_token,
    hash_password,
    require_token,
    verify_password,
)
from event_manager.services.notification_service import (
    Mailer,
    dispatch_emails,
    password_reset_email,
    verification_email,
)

logger = logging.getLogger(__name__)


def _get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def register(
    db: Session,
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    name: str,
    email: str,
    password: str,
) -> User:
    """Create an unverified account and queue its verification email."""
    if _get_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=UserRole.admin if email in settings.admin_emails else UserRole.user,
        email_verified=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    db.refresh(user)
    logger.info("User registered: %s (%s)", user.email, user.user_id)

    token = create_token(user.user_id, VERIFY_EMAIL)
    background_tasks.add_task(dispatch_emails, mailer, [verification_email(user.email, user.name, token)])
    return user


def verify_email(db: Session, token: str) -> User:
    user_id = require_token(token, VERIFY_EMAIL)
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")
    if not user.email_verified:
        user.email_verified = True
        db.commit()
        logger.info("Email verified for user %s", user.user_id)
    return user


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """Check credentials and return the user with a fresh session token."""
    user = _get_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.email_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Email not verified")
    logger.info("User logged in: %s", user.email)
    return user, create_token(user.user_id, SESSION)


def forgot_password(db: Session, background_tasks: BackgroundTasks, mailer: Mailer, email: str) -> None:
    user = _get_by_email(db, email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    token = create_token(user.user_id, RESET_PASSWORD)
    background_tasks.add_task(dispatch_emails, mailer, [password_reset_email(user.email, user.name, token)])
    logger.info("Password reset requested for user %s", user.user_id)


def reset_password(db: Session, token: str, new_password: str) -> User:
    user_id = require_token(token, RESET_PASSWORD)
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")
    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password reset for user %s", user.user_id)
    return user


def update_profile(
    db: Session,
    user: User,
    name: Optional[str] = None,
    email: Optional[str] = None,
    old_password: Optional[str] = None,
    new_password: Optional[str] = None,
) -> User:
    """Partial self-update; a password change needs the current password."""
    if (old_password is None) != (new_password is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both oldPassword and newPassword are required to change the password",
        )
    if old_password is not None and not verify_password(old_password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Old password is incorrect")

    if email is not None and email != user.email:
        other = _get_by_email(db, email)
        if other and other.user_id != user.user_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
        user.email = email
    if name is not None:
        user.name = name
    if new_password is not None:
        user.password_hash = hash_password(new_password)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
    db.refresh(user)
    logger.info("User profile updated: %s", user.user_id)
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at, User.email).all()
