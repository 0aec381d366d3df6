"""
Event registration workflow.

``register_participant`` is the only multi-statement invariant in the
system: the capacity check and the insert must not interleave with a
concurrent registration for the same event.  The transaction therefore
opens with a write on the event row (see ``events.lock_event``), which
makes the database serialize registrations per event across processes.
Every check after that reads state that no other registration can change
until this transaction ends.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_registry.core.errors import CapacityExceededError, DuplicateRegistrationError, NotFoundError
from event_registry.database.db import transaction
from event_registry.models.events import Event
from event_registry.models.participants import Participant
from event_registry.models.registrations import Registration
from event_registry.schemas.common import PaginationMeta
from event_registry.schemas.events import EventOut, ParticipantEventOut, ParticipantEventPage
from event_registry.schemas.participants import EventParticipantOut, ParticipantOut
from event_registry.schemas.registrations import (
    EventParticipantPage,
    EventParticipantsPagination,
    RegistrationOut,
)
from event_registry.services.events import count_registrations, lock_event
from event_registry.services.pagination import count_rows, normalize_page, page_slice

logger = logging.getLogger(__name__)


def _lock_participant(db: Session, participant_id: UUID) -> Participant | None:
    """Load the participant and keep it from being deleted until commit."""
    stmt = (
        select(Participant)
        .where(Participant.id == participant_id)
        .with_for_update(read=True)
        .execution_options(populate_existing=True)
    )
    return db.scalar(stmt)


def _participant_exists(db: Session, participant_id: UUID) -> bool:
    with transaction(db):
        return db.scalar(select(Participant.id).where(Participant.id == participant_id)) is not None


def register_participant(db: Session, *, event_id: UUID, participant_id: UUID) -> RegistrationOut:
    """Register a participant for an event.

    Checks run in order, each with its own failure:
    event exists, participant exists, event below capacity, not yet registered.
    """
    try:
        with transaction(db):
            if not lock_event(db, event_id):
                raise NotFoundError("Event")
            event = db.get(Event, event_id, populate_existing=True)

            participant = _lock_participant(db, participant_id)
            if participant is None:
                raise NotFoundError("Participant")

            registered = count_registrations(db, event_id)
            if registered >= event.capacity:
                logger.warning(
                    "Registration rejected: event %s is full (%d/%d)", event_id, registered, event.capacity
                )
                raise CapacityExceededError()

            already = db.scalar(
                select(Registration.registered_at).where(
                    Registration.event_id == event_id, Registration.participant_id == participant_id
                )
            )
            if already is not None:
                raise DuplicateRegistrationError()

            registration = Registration(event_id=event_id, participant_id=participant_id)
            db.add(registration)
            db.flush()
            result = RegistrationOut(
                event_id=event_id,
                participant_id=participant_id,
                registered_at=registration.registered_at,
                event=EventOut.model_validate(event),
                participant=ParticipantOut.model_validate(participant),
            )
    except IntegrityError as exc:
        # Either the primary key rejected a concurrent duplicate or the
        # participant foreign key lost its row
        if not _participant_exists(db, participant_id):
            raise NotFoundError("Participant") from exc
        raise DuplicateRegistrationError() from exc

    logger.info(
        "Registered participant %s for event %s (%d/%d)", participant_id, event_id, registered + 1, event.capacity
    )
    return result


def remove_participant(db: Session, *, event_id: UUID, participant_id: UUID) -> None:
    with transaction(db):
        registration = db.get(Registration, (event_id, participant_id))
        if registration is None:
            raise NotFoundError("Registration")
        db.delete(registration)

    logger.info("Removed participant %s from event %s", participant_id, event_id)


def list_event_participants(
    db: Session, event_id: UUID, *, page: int = 1, limit: int = 10
) -> EventParticipantPage:
    """Participants of an event, most recent registration first."""
    page, limit = normalize_page(page, limit)
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event")

    stmt = (
        select(Participant, Registration.registered_at)
        .join(Registration, Registration.participant_id == Participant.id)
        .where(Registration.event_id == event_id)
    )
    total = count_rows(db, stmt)
    rows = db.execute(
        page_slice(stmt.order_by(Registration.registered_at.desc(), Participant.id), page, limit)
    ).all()

    data = [
        EventParticipantOut.model_validate(
            {**ParticipantOut.model_validate(participant).model_dump(), "registered_at": registered_at}
        )
        for participant, registered_at in rows
    ]
    return EventParticipantPage(
        data=data,
        pagination=EventParticipantsPagination.build(
            total=total,
            page=page,
            limit=limit,
            remaining_capacity=max(0, event.capacity - total),
        ),
    )


def list_participant_events(
    db: Session, participant_id: UUID, *, page: int = 1, limit: int = 10
) -> ParticipantEventPage:
    """Events a participant is registered for, most recent registration first."""
    page, limit = normalize_page(page, limit)
    if db.get(Participant, participant_id) is None:
        raise NotFoundError("Participant")

    stmt = (
        select(Event, Registration.registered_at)
        .join(Registration, Registration.event_id == Event.id)
        .where(Registration.participant_id == participant_id)
    )
    total = count_rows(db, stmt)
    rows = db.execute(
        page_slice(stmt.order_by(Registration.registered_at.desc(), Event.id), page, limit)
    ).all()

    data = [
        ParticipantEventOut.model_validate(
            {**EventOut.model_validate(event).model_dump(), "registered_at": registered_at}
        )
        for event, registered_at in rows
    ]
    return ParticipantEventPage(
        data=data,
        pagination=PaginationMeta.build(total=total, page=page, limit=limit),
    )
