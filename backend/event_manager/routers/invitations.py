"""Invitation API routes: the organiser sends, the invitee responds."""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from event_manager.database import get_db
from event_manager.dependencies import get_current_user
from event_manager.models.user import User
from event_manager.schemas.participant import (
    InvitationResponse,
    InviteRequest,
    ParticipantOut,
    ParticipantWithEvent,
)
from event_manager.services import participant_service
from event_manager.services.notification_service import Mailer, get_mailer

router = APIRouter()


@router.post("/invite", response_model=ParticipantOut, status_code=status.HTTP_201_CREATED)
def invite(
    payload: InviteRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Invite a user to one of the caller's events."""
    return participant_service.invite_user(
        db, background_tasks, mailer, payload.event_id, payload.user_id, current_user
    )


@router.put("/respond", response_model=ParticipantOut)
def respond(
    payload: InvitationResponse,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Accept or decline a pending invitation."""
    return participant_service.respond_to_invitation(db, payload.invitation_id, current_user, payload.status)


@router.get("/my-invitations", response_model=list[ParticipantWithEvent])
def my_invitations(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Pending invitations for upcoming events."""
    return participant_service.list_my_invitations(db, current_user)
