import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from event_registry.core.timeutils import utcnow
from event_registry.database.db import Base
from event_registry.models.events import Event
from event_registry.models.participants import Participant


class Registration(Base):
    """Join row linking one event and one participant."""

    __tablename__ = "event_participants"
    __table_args__ = (
        Index("ix_event_participants_participant_id", "participant_id"),
        Index("ix_event_participants_event_registered_at", "event_id", "registered_at"),
    )

    # The composite primary key makes (event, participant) unique.
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True
    )
    participant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("participants.id", ondelete="CASCADE"), primary_key=True
    )
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    event: Mapped[Event] = relationship(back_populates="registrations")
    participant: Mapped[Participant] = relationship(back_populates="registrations")

    def __repr__(self) -> str:
        return f"<Registration(event_id={self.event_id}, participant_id={self.participant_id})>"
