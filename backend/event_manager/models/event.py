"""Event ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from event_manager.database import Base


class EventStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(500), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    # Owner reference, not enforced as a foreign key
    created_by = Column(String(36), nullable=False, index=True)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.pending)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship(
        "User",
        primaryjoin="foreign(Event.created_by) == User.user_id",
        viewonly=True,
        lazy="joined",
    )
    participants = relationship("Participant", back_populates="event", cascade="all, delete-orphan")
