import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_registry.core.errors import ConflictError, NotFoundError, ValidationError
from event_registry.core.timeutils import utcnow
from event_registry.database.db import transaction
from event_registry.models.participants import Participant
from event_registry.schemas.common import PaginationMeta
from event_registry.schemas.participants import (
    ParticipantCreate,
    ParticipantOut,
    ParticipantPage,
    ParticipantUpdate,
)
from event_registry.services.pagination import count_rows, normalize_page, page_slice

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email already in use"


def _email_taken(db: Session, email: str, exclude_id: UUID | None = None) -> bool:
    stmt = select(Participant.id).where(Participant.email == email)
    if exclude_id is not None:
        stmt = stmt.where(Participant.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def create_participant(db: Session, payload: ParticipantCreate) -> ParticipantOut:
    email = payload.email.lower()
    try:
        with transaction(db):
            if _email_taken(db, email):
                raise ConflictError(EMAIL_IN_USE)
            participant = Participant(name=payload.name, email=email)
            db.add(participant)
            db.flush()
            result = ParticipantOut.model_validate(participant)
    except IntegrityError as exc:
        # Lost a race with a concurrent insert of the same email
        raise ConflictError(EMAIL_IN_USE) from exc

    logger.info("Created participant %s", participant.id)
    return result


def list_participants(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    name: str | None = None,
    email: str | None = None,
) -> ParticipantPage:
    """List participants, newest first.

    ``name`` is a case-insensitive substring filter, ``email`` an exact match.
    """
    page, limit = normalize_page(page, limit)

    stmt = select(Participant)
    if name:
        stmt = stmt.where(Participant.name.icontains(name, autoescape=True))
    if email:
        stmt = stmt.where(Participant.email == email.strip().lower())

    total = count_rows(db, stmt)
    ordered = stmt.order_by(Participant.created_at.desc(), Participant.id)
    participants = db.scalars(page_slice(ordered, page, limit)).all()

    return ParticipantPage(
        data=[ParticipantOut.model_validate(p) for p in participants],
        pagination=PaginationMeta.build(total=total, page=page, limit=limit),
    )


def get_participant(db: Session, participant_id: UUID) -> ParticipantOut:
    participant = db.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant")
    return ParticipantOut.model_validate(participant)


def update_participant(db: Session, participant_id: UUID, payload: ParticipantUpdate) -> ParticipantOut:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("At least one field (name or email) must be provided for update")
    if "email" in changes:
        changes["email"] = changes["email"].lower()

    try:
        with transaction(db):
            participant = db.get(Participant, participant_id)
            if participant is None:
                raise NotFoundError("Participant")
            if "email" in changes and _email_taken(db, changes["email"], exclude_id=participant_id):
                raise ConflictError(EMAIL_IN_USE)

            for field_name, value in changes.items():
                setattr(participant, field_name, value)
            participant.updated_at = utcnow()
            db.flush()
            result = ParticipantOut.model_validate(participant)
    except IntegrityError as exc:
        raise ConflictError(EMAIL_IN_USE) from exc

    logger.info("Updated participant %s (fields=%s)", participant_id, sorted(changes))
    return result


def delete_participant(db: Session, participant_id: UUID) -> None:
    """Delete a participant; the database drops their registrations."""
    with transaction(db):
        participant = db.get(Participant, participant_id)
        if participant is None:
            raise NotFoundError("Participant")
        db.delete(participant)

    logger.info("Deleted participant %s", participant_id)
