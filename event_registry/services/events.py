import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from event_registry.core.errors import FieldError, NotFoundError, ValidationError
from event_registry.core.timeutils import as_utc, utcnow
from event_registry.database.db import transaction
from event_registry.models.events import Event
from event_registry.models.registrations import Registration
from event_registry.schemas.common import PaginationMeta
from event_registry.schemas.events import (
    EventCreate,
    EventOut,
    EventPage,
    EventSortField,
    EventUpdate,
    SortOrder,
)
from event_registry.services.pagination import count_rows, normalize_page, page_slice

logger = logging.getLogger(__name__)

# Default listing order: most recently created first.
DEFAULT_SORT_BY = EventSortField.CREATED_AT
DEFAULT_SORT_ORDER = SortOrder.DESC

SORT_COLUMNS = {
    EventSortField.TITLE: Event.title,
    EventSortField.EVENT_DATE: Event.event_date,
    EventSortField.CREATED_AT: Event.created_at,
    EventSortField.CAPACITY: Event.capacity,
}


def _check_event_fields(changes: dict[str, Any]) -> None:
    """Re-check the business rules that depend on the current time."""
    errors = []
    if "event_date" in changes and as_utc(changes["event_date"]) <= utcnow():
        errors.append(FieldError("eventDate", "Event date must be in the future", changes["event_date"]))
    if "capacity" in changes and changes["capacity"] < 1:
        errors.append(FieldError("capacity", "Capacity must be a positive integer", changes["capacity"]))
    if errors:
        raise ValidationError(errors=errors)


def lock_event(db: Session, event_id: UUID) -> bool:
    """Take the write lock on an event row; returns False if it does not exist.

    The no-op update holds a row lock (server databases) or the database
    write lock (SQLite) until the transaction ends. Assigning updated_at to
    itself keeps the onupdate default from firing.
    """
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .values(updated_at=Event.updated_at)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    return res.rowcount == 1  # type: ignore


def count_registrations(db: Session, event_id: UUID) -> int:
    total = db.scalar(
        select(func.count()).select_from(Registration).where(Registration.event_id == event_id)
    )
    return int(total or 0)


def create_event(db: Session, payload: EventCreate) -> EventOut:
    changes = payload.model_dump()
    _check_event_fields(changes)

    with transaction(db):
        event = Event(
            title=payload.title,
            description=payload.description,
            event_date=as_utc(payload.event_date),
            capacity=payload.capacity,
        )
        db.add(event)
        db.flush()
        result = EventOut.model_validate(event)

    logger.info("Created event %s (capacity=%d)", event.id, event.capacity)
    return result


def list_events(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    sort_by: EventSortField = DEFAULT_SORT_BY,
    sort_order: SortOrder = DEFAULT_SORT_ORDER,
) -> EventPage:
    page, limit = normalize_page(page, limit)
    column = SORT_COLUMNS[EventSortField(sort_by)]
    ordering = column.asc() if SortOrder(sort_order) == SortOrder.ASC else column.desc()

    stmt = select(Event)
    total = count_rows(db, stmt)
    events = db.scalars(page_slice(stmt.order_by(ordering, Event.id), page, limit)).all()

    return EventPage(
        data=[EventOut.model_validate(e) for e in events],
        pagination=PaginationMeta.build(total=total, page=page, limit=limit),
    )


def get_event(db: Session, event_id: UUID) -> EventOut:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event")
    return EventOut.model_validate(event)


def update_event(db: Session, event_id: UUID, payload: EventUpdate) -> EventOut:
    """Apply only the fields present in ``payload``.

    An empty patch only refreshes ``updated_at``.
    """
    changes = payload.model_dump(exclude_unset=True)
    _check_event_fields(changes)

    with transaction(db):
        if not lock_event(db, event_id):
            raise NotFoundError("Event")
        event = db.get(Event, event_id, populate_existing=True)

        if "capacity" in changes:
            registered = count_registrations(db, event_id)
            if changes["capacity"] < registered:
                raise ValidationError.for_field(
                    "capacity",
                    f"Capacity cannot be lower than the {registered} registered participants",
                    changes["capacity"],
                )
        if "event_date" in changes:
            changes["event_date"] = as_utc(changes["event_date"])

        for name, value in changes.items():
            setattr(event, name, value)
        event.updated_at = utcnow()
        db.flush()
        result = EventOut.model_validate(event)

    logger.info("Updated event %s (fields=%s)", event_id, sorted(changes) or "none")
    return result


def delete_event(db: Session, event_id: UUID) -> None:
    with transaction(db):
        event = db.get(Event, event_id)
        if event is None:
            raise NotFoundError("Event")
        db.delete(event)

    logger.info("Deleted event %s", event_id)
