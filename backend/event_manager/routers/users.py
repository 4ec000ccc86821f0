"""User & authentication API routes."""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from event_manager.database import get_db
from event_manager.dependencies import get_current_user, require_admin
from event_manager.models.user import User
from event_manager.schemas.common import MessageOut
from event_manager.schemas.user import (
    ForgotPasswordRequest,
    LoginOut,
    ProfileUpdate,
    ResetPasswordRequest,
    TokenCheckOut,
    UserLogin,
    UserOut,
    UserRegister,
)
from event_manager.services import user_service
from event_manager.services.notification_service import Mailer, get_mailer

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserRegister,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Create an unverified account; a verification link is emailed."""
    return user_service.register(
        db=db,
        background_tasks=background_tasks,
        mailer=mailer,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )


@router.post("/login", response_model=LoginOut)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user, token = user_service.login(db, payload.email, payload.password)
    return LoginOut(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        role=user.role.value,
        token=token,
    )


@router.get("/verify-email/{token}", response_model=MessageOut)
def verify_email(token: str, db: Session = Depends(get_db)):
    user_service.verify_email(db, token)
    return MessageOut(message="Email verified successfully")


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    user_service.forgot_password(db, background_tasks, mailer, payload.email)
    return MessageOut(message="Password reset email sent")


@router.post("/reset-password/{token}", response_model=MessageOut)
def reset_password(token: str, payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user_service.reset_password(db, token, payload.password)
    return MessageOut(message="Password has been reset")


@router.get("/profile", response_model=UserOut)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update name / email, or change the password given the current one."""
    return user_service.update_profile(
        db,
        current_user,
        name=payload.name,
        email=payload.email,
        old_password=payload.old_password,
        new_password=payload.new_password,
    )


@router.get("/verify-token", response_model=TokenCheckOut)
def verify_token(current_user: User = Depends(get_current_user)):
    return TokenCheckOut(valid=True, user=UserOut.model_validate(current_user))


@router.get("/all", response_model=list[UserOut])
def list_users(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    """List all users (admin only)."""
    return user_service.list_users(db)
