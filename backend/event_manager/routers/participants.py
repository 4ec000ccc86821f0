"""Participant API routes: join / leave and the invitee's side of invitations."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from event_manager.database import get_db
from event_manager.dependencies import get_current_user
from event_manager.models.user import User
from event_manager.routers import invitations
from event_manager.schemas.common import MessageOut
from event_manager.schemas.participant import (
    InvitationAction,
    JoinRequest,
    ParticipantOut,
    ParticipantWithEvent,
    ParticipantWithUser,
)
from event_manager.services import participant_service

router = APIRouter()

# Aliases of the invitation routes under /api/participants
router.add_api_route(
    "/my-invitations", invitations.my_invitations,
    methods=["GET"], response_model=list[ParticipantWithEvent],
)
router.add_api_route(
    "/send-invitation", invitations.invite,
    methods=["POST"], response_model=ParticipantOut, status_code=status.HTTP_201_CREATED,
)


@router.get("/joined-events", response_model=list[ParticipantWithEvent])
def joined_events(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return participant_service.list_joined_events(db, current_user)


@router.post("/join", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def join_event(
    payload: JoinRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    participant_service.join_event(db, payload.event_id, current_user)
    return MessageOut(message="Successfully joined event")


@router.post("/accept-invitation", response_model=ParticipantOut)
def accept_invitation(
    payload: InvitationAction,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return participant_service.accept_invitation(db, payload.invitation_id, current_user)


@router.post("/decline-invitation", response_model=ParticipantOut)
def decline_invitation(
    payload: InvitationAction,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return participant_service.decline_invitation(db, payload.invitation_id, current_user)


@router.get("/{event_id}", response_model=list[ParticipantWithUser])
def list_participants(event_id: str, db: Session = Depends(get_db)):
    """Everyone attached to an event, with name and email."""
    return participant_service.list_participants(db, event_id)


@router.delete("/{event_id}/leave", response_model=MessageOut)
def leave_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    participant_service.leave_event(db, event_id, current_user)
    return MessageOut(message="Successfully left event")
