"""Event API routes — delegates to event_service for ownership and approval rules."""
from typing import Optional
from datetime import datetime
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from event_manager.config import settings
from event_manager.database import get_db
from event_manager.dependencies import get_current_user, get_optional_user, require_admin
from event_manager.models.event import EventStatus
from event_manager.models.user import User
from event_manager.schemas.common import MessageOut
from event_manager.schemas.event import EventCreate, EventDecision, EventDetailOut, EventOut, EventPage, EventUpdate
from event_manager.services import event_service
from event_manager.services.event_service import EventFilter
from event_manager.services.notification_service import Mailer, get_mailer

router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new event owned by the caller; it starts out pending."""
    return event_service.create_event(
        db=db,
        owner=current_user,
        title=payload.title,
        description=payload.description,
        location=payload.location,
        date=payload.date,
    )


@router.get("/", response_model=EventPage)
def list_events(
    search: Optional[str] = Query(None, description="Substring of title or description"),
    location: Optional[str] = Query(None),
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """List events with search, filters and pagination, sorted by date."""
    filters = EventFilter(
        search=search,
        location=location,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
    )
    return event_service.list_events(db, filters, page=page, limit=limit, viewer=viewer)


@router.get("/my-events", response_model=EventPage)
def list_my_events(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Events created by the caller."""
    filters = EventFilter(created_by=current_user.user_id)
    return event_service.list_events(db, filters, page=page, limit=limit, viewer=current_user)


@router.get("/admin/pending", response_model=EventPage)
def list_pending_events(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Events awaiting an admin decision."""
    filters = EventFilter(status=EventStatus.pending)
    return event_service.list_events(db, filters, page=page, limit=limit)


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event with its creator resolved."""
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update an event (creator or admin); omitted fields keep their value."""
    updates = payload.model_dump(exclude_unset=True)
    return event_service.update_event(db=db, event_id=event_id, actor=current_user, updates=updates)


@router.delete("/{event_id}", response_model=MessageOut)
def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event_service.delete_event(db=db, event_id=event_id, actor=current_user)
    return MessageOut(message="Event deleted successfully")


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

@router.put("/{event_id}/approve", response_model=MessageOut)
def approve_event(
    event_id: str,
    payload: EventDecision,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Approve or reject a pending event; approval notifies its participants."""
    event = event_service.decide_event(
        db=db,
        background_tasks=background_tasks,
        mailer=mailer,
        event_id=event_id,
        admin=admin,
        decision=payload.status,
    )
    return MessageOut(message=f"Event {event.status.value}")


@router.put("/{event_id}/admin-edit", response_model=EventOut)
def admin_edit_event(
    event_id: str,
    payload: EventUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    updates = payload.model_dump(exclude_unset=True)
    return event_service.admin_update_event(db=db, event_id=event_id, admin=admin, updates=updates)


@router.delete("/{event_id}/admin-delete", response_model=MessageOut)
def admin_delete_event(
    event_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    event_service.admin_delete_event(db=db, event_id=event_id, admin=admin)
    return MessageOut(message="Event deleted successfully")
