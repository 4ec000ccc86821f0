"""Core event service — event CRUD and the admin approval state machine.

Responsibilities:
- Ownership gate: only the creator (or an admin) may edit/delete an event
- Approval: pending → approved | rejected, admin only, exactly once
- Approval sweep: on approval every participant of the event is emailed
- Filtered, paginated listing with optional "has joined" annotation
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from event_manager.models.event import Event, EventStatus
from event_manager.models.participant import InvitationStatus, Participant
from event_manager.models.user import User
from event_manager.schemas.event import EventOut, EventPage
from event_manager.services.notification_service import Mailer, dispatch_emails, event_approved_email
from event_manager.services.validation import parse_id, to_utc, total_pages

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "location", "date")
DECISIONS = (EventStatus.approved.value, EventStatus.rejected.value)


@dataclass
class EventFilter:
    """Optional predicates for listing events; unset fields do not filter."""

    search: Optional[str] = None
    location: Optional[str] = None
    status: Optional[EventStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_by: Optional[str] = None

    def apply(self, query: Query) -> Query:
        if self.search:
            pattern = f"%{self.search}%"
            query = query.filter(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))
        if self.location:
            query = query.filter(Event.location.ilike(f"%{self.location}%"))
        if self.status is not None:
            query = query.filter(Event.status == self.status)
        if self.start_date is not None:
            query = query.filter(Event.date >= to_utc(self.start_date))
        if self.end_date is not None:
            query = query.filter(Event.date <= to_utc(self.end_date))
        if self.created_by is not None:
            query = query.filter(Event.created_by == self.created_by)
        return query


def _get_or_404(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == parse_id(event_id, "Event")).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _check_authorization(event: Event, actor: User, action: str) -> None:
    """Only the creator or an admin may modify an event."""
    if event.created_by != actor.user_id and not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this event",
        )


def _apply_updates(event: Event, updates: dict[str, Any]) -> None:
    for field, value in updates.items():
        if field in EDITABLE_FIELDS and value is not None:
            setattr(event, field, to_utc(value) if field == "date" else value)


def create_event(
    db: Session,
    owner: User,
    title: str,
    description: str,
    location: str,
    date: datetime,
) -> Event:
    """Create an event; it always starts out pending approval."""
    event = Event(
        title=title,
        description=description,
        location=location,
        date=to_utc(date),
        created_by=owner.user_id,
        status=EventStatus.pending,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event created: '%s' (%s) by %s", title, event.event_id, owner.user_id)
    return event


def list_events(
    db: Session,
    filters: EventFilter,
    page: int = 1,
    limit: int = 10,
    viewer: Optional[User] = None,
) -> EventPage:
    """One page of events ordered by date, with the total for page math.

    When ``viewer`` is given each event is annotated with whether the viewer
    holds an accepted participation in it.
    """
    query = filters.apply(db.query(Event))
    total = query.count()
    events = (
        query.order_by(Event.date.asc(), Event.event_id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    items = [EventOut.model_validate(e) for e in events]
    if viewer is not None:
        joined = set()
        if events:
            rows = (
                db.query(Participant.event_id)
                .filter(
                    Participant.user_id == viewer.user_id,
                    Participant.invitation_status == InvitationStatus.accepted,
                    Participant.event_id.in_([e.event_id for e in events]),
                )
                .all()
            )
            joined = {row.event_id for row in rows}
        for item in items:
            item.has_joined = item.event_id in joined

    return EventPage(
        total=total,
        page=page,
        page_size=limit,
        total_pages=total_pages(total, limit),
        events=items,
    )


def get_event(db: Session, event_id: str) -> Event:
    return _get_or_404(db, event_id)


def update_event(db: Session, event_id: str, actor: User, updates: dict[str, Any]) -> Event:
    """Partial update of the descriptive fields by the creator or an admin."""
    event = _get_or_404(db, event_id)
    _check_authorization(event, actor, "update")
    _apply_updates(event, updates)
    db.commit()
    db.refresh(event)
    logger.info("Event updated: %s by %s", event.event_id, actor.user_id)
    return event


def delete_event(db: Session, event_id: str, actor: User) -> None:
    event = _get_or_404(db, event_id)
    _check_authorization(event, actor, "delete")
    db.delete(event)
    db.commit()
    logger.info("Event deleted: %s by %s", event_id, actor.user_id)


def admin_update_event(db: Session, event_id: str, admin: User, updates: dict[str, Any]) -> Event:
    """Same field semantics as ``update_event`` without the ownership gate."""
    event = _get_or_404(db, event_id)
    _apply_updates(event, updates)
    db.commit()
    db.refresh(event)
    logger.info("Admin %s updated event %s", admin.user_id, event.event_id)
    return event


def admin_delete_event(db: Session, event_id: str, admin: User) -> None:
    event = _get_or_404(db, event_id)
    db.delete(event)
    db.commit()
    logger.info("Admin %s deleted event %s", admin.user_id, event_id)


def decide_event(
    db: Session,
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    event_id: str,
    admin: User,
    decision: str,
) -> Event:
    """Move a pending event to approved or rejected.

    Approval queues one email per participant of the event; failed sends are
    logged by the mailer and do not undo the approval.
    """
    event = _get_or_404(db, event_id)
    if decision not in DECISIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid status. Use 'approved' or 'rejected'",
        )
    if event.status != EventStatus.pending:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event is already {event.status.value}",
        )

    event.status = EventStatus(decision)
    db.commit()
    db.refresh(event)
    logger.info("Admin %s updated event %s to status: %s", admin.user_id, event.event_id, decision)

    if event.status == EventStatus.approved:
        emails = []
        for participant in event.participants:
            if participant.user is None:
                logger.warning(
                    "Skipping approval email for missing user %s (event %s)",
                    participant.user_id, event.event_id,
                )
                continue
            emails.append(event_approved_email(
                participant.user.email, participant.user.name,
                event.title, event.date, event.location,
            ))
        if emails:
            background_tasks.add_task(dispatch_emails, mailer, emails)
        logger.info("Queued %d approval notification(s) for event %s", len(emails), event.event_id)
    return event
