"""Pydantic schemas for participation and invitations."""
from __future__ import annotations
from datetime import datetime
from typing import Optional

from event_manager.schemas.common import APIModel
from event_manager.schemas.event import EventSummary
from event_manager.schemas.user import UserSummary


class JoinRequest(APIModel):
    event_id: str


class InviteRequest(APIModel):
    event_id: str
    user_id: str


class InvitationResponse(APIModel):
    invitation_id: str
    status: str


class InvitationAction(APIModel):
    invitation_id: str


class ParticipantOut(APIModel):
    participant_id: str
    event_id: str
    user_id: str
    invitation_status: str
    created_at: Optional[datetime] = None


class ParticipantWithUser(ParticipantOut):
    user: Optional[UserSummary] = None


class ParticipantWithEvent(ParticipantOut):
    event: Optional[EventSummary] = None
