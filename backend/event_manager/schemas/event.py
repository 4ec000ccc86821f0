"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import Field

from event_manager.schemas.common import APIModel
from event_manager.schemas.user import UserSummary


class EventCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1, max_length=500)
    date: datetime


class EventUpdate(APIModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1, max_length=500)
    date: Optional[datetime] = None


class EventDecision(APIModel):
    status: str


class EventOut(APIModel):
    event_id: str
    title: str
    description: str
    location: str
    date: datetime
    created_by: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    has_joined: Optional[bool] = None


class EventDetailOut(EventOut):
    creator: Optional[UserSummary] = None


class EventPage(APIModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    events: list[EventOut] = []


class EventSummary(APIModel):
    event_id: str
    title: str
    description: str
    location: str
    date: datetime
    status: str
