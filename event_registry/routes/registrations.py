from fastapi import APIRouter, Depends, Query, status
from pydantic import UUID4
from sqlalchemy.orm import Session

from event_registry.core.rate_limit import enforce_rate_limit
from event_registry.database.db import get_db
from event_registry.schemas.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from event_registry.schemas.events import ParticipantEventPage
from event_registry.schemas.registrations import EventParticipantPage, RegistrationOut
from event_registry.services import registrations as registration_service

router = APIRouter(prefix="/api", tags=["event participants"], dependencies=[Depends(enforce_rate_limit)])


@router.post(
    "/events/{event_id}/participants/{participant_id}",
    response_model=RegistrationOut,
    status_code=status.HTTP_201_CREATED,
)
def register_participant(event_id: UUID4, participant_id: UUID4, db: Session = Depends(get_db)):
    return registration_service.register_participant(db, event_id=event_id, participant_id=participant_id)


@router.delete(
    "/events/{event_id}/participants/{participant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_participant(event_id: UUID4, participant_id: UUID4, db: Session = Depends(get_db)):
    registration_service.remove_participant(db, event_id=event_id, participant_id=participant_id)


@router.get("/events/{event_id}/participants", response_model=EventParticipantPage)
def list_event_participants(
    event_id: UUID4,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return registration_service.list_event_participants(db, event_id, page=page, limit=limit)


@router.get("/participants/{participant_id}/events", response_model=ParticipantEventPage)
def list_participant_events(
    participant_id: UUID4,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return registration_service.list_participant_events(db, participant_id, page=page, limit=limit)
