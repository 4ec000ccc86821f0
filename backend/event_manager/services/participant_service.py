"""Participation & invitation state machine.

One ``Participant`` row per (event, user).  A self-join creates the row as
``accepted``; an invitation creates it as ``pending`` and the invitee later
moves it to ``accepted`` or ``declined``.  Both of those are terminal.  Leaving
deletes the row so the user may join again.
"""
import logging
from datetime import datetime, timezone

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_manager.models.event import Event, EventStatus
from event_manager.models.participant import InvitationStatus, Participant
from event_manager.models.user import User
from event_manager.services.notification_service import Mailer, dispatch_emails, invitation_email
from event_manager.services.validation import is_past, parse_id

logger = logging.getLogger(__name__)

RESPONSES = (InvitationStatus.accepted.value, InvitationStatus.declined.value)


def _find(db: Session, event_id: str, user_id: str):
    return (
        db.query(Participant)
        .filter(Participant.event_id == event_id, Participant.user_id == user_id)
        .first()
    )


def _insert(db: Session, participant: Participant, duplicate_detail: str) -> Participant:
    """Insert relying on the (event_id, user_id) unique constraint as the last word."""
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=duplicate_detail)
    db.refresh(participant)
    return participant


def join_event(db: Session, event_id: str, user: User) -> Participant:
    """Self-service join; the participation is accepted straight away."""
    event_id = parse_id(event_id, "Event")
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    if is_past(event.date):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot join an event that has already taken place")
    if _find(db, event_id, user.user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already joined this event")

    participant = _insert(
        db,
        Participant(event_id=event_id, user_id=user.user_id, invitation_status=InvitationStatus.accepted),
        "Already joined this event",
    )
    logger.info("User %s joined event %s", user.user_id, event_id)
    return participant


def leave_event(db: Session, event_id: str, user: User) -> None:
    participant = _find(db, parse_id(event_id, "Event"), user.user_id)
    if not participant:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are not a participant in this event",
        )
    db.delete(participant)
    db.commit()
    logger.info("User %s left event %s", user.user_id, participant.event_id)


def invite_user(
    db: Session,
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    event_id: str,
    invitee_id: str,
    inviter: User,
) -> Participant:
    """Create a pending invitation.

    The invitee is emailed now if the event is already approved; otherwise the
    approval sweep will reach them later.
    """
    event_id = parse_id(event_id, "Event")
    invitee_id = parse_id(invitee_id, "User")

    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    invitee = db.query(User).filter(User.user_id == invitee_id).first()
    if not invitee:
        raise HTTPException(status_code=404, detail="User not found")
    if event.created_by != inviter.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the event creator can send invitations",
        )
    if _find(db, event_id, invitee_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already invited or joined")

    invitation = _insert(
        db,
        Participant(event_id=event_id, user_id=invitee_id, invitation_status=InvitationStatus.pending),
        "User already invited or joined",
    )
    logger.info("User %s invited to event %s by %s", invitee_id, event_id, inviter.user_id)

    if event.status == EventStatus.approved:
        email = invitation_email(invitee.email, invitee.name, event.title, event.date, event.location)
        background_tasks.add_task(dispatch_emails, mailer, [email])
    else:
        logger.info("Invitation email for %s deferred until event %s is approved", invitee_id, event_id)
    return invitation


def respond_to_invitation(db: Session, invitation_id: str, user: User, response: str) -> Participant:
    """Accept or decline one of the caller's pending invitations."""
    invitation_id = parse_id(invitation_id, "Invitation")
    invitation = (
        db.query(Participant)
        .filter(Participant.participant_id == invitation_id, Participant.user_id == user.user_id)
        .first()
    )
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found")
    if response not in RESPONSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid status. Must be 'accepted' or 'declined'",
        )
    if invitation.invitation_status == InvitationStatus.accepted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You have already joined this event")
    if invitation.invitation_status == InvitationStatus.declined:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You have already declined this invitation")

    event = invitation.event
    if event is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event no longer exists")
    if response == InvitationStatus.accepted.value and is_past(event.date):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event has already taken place")

    invitation.invitation_status = InvitationStatus(response)
    db.commit()
    db.refresh(invitation)
    logger.info("User %s responded to invitation %s: %s", user.user_id, invitation_id, response)
    return invitation


def accept_invitation(db: Session, invitation_id: str, user: User) -> Participant:
    return respond_to_invitation(db, invitation_id, user, InvitationStatus.accepted.value)


def decline_invitation(db: Session, invitation_id: str, user: User) -> Participant:
    return respond_to_invitation(db, invitation_id, user, InvitationStatus.declined.value)


def list_participants(db: Session, event_id: str) -> list[Participant]:
    event_id = parse_id(event_id, "Event")
    if not db.query(Event).filter(Event.event_id == event_id).first():
        raise HTTPException(status_code=404, detail="Event not found")
    return (
        db.query(Participant)
        .filter(Participant.event_id == event_id)
        .order_by(Participant.created_at, Participant.participant_id)
        .all()
    )


def list_my_invitations(db: Session, user: User) -> list[Participant]:
    """Pending invitations for events that have not happened yet."""
    return (
        db.query(Participant)
        .join(Event, Participant.event_id == Event.event_id)
        .filter(
            Participant.user_id == user.user_id,
            Participant.invitation_status == InvitationStatus.pending,
            Event.date >= datetime.now(timezone.utc),
        )
        .order_by(Event.date)
        .all()
    )


def list_joined_events(db: Session, user: User) -> list[Participant]:
    return (
        db.query(Participant)
        .join(Event, Participant.event_id == Event.event_id)
        .filter(
            Participant.user_id == user.user_id,
            Participant.invitation_status == InvitationStatus.accepted,
        )
        .order_by(Event.date)
        .all()
    )
