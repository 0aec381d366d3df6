from fastapi import APIRouter, Depends, Query, status
from pydantic import UUID4, EmailStr
from sqlalchemy.orm import Session

from event_registry.core.rate_limit import enforce_rate_limit
from event_registry.database.db import get_db
from event_registry.schemas.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from event_registry.schemas.participants import (
    ParticipantCreate,
    ParticipantOut,
    ParticipantPage,
    ParticipantUpdate,
)
from event_registry.services import participants as participant_service

router = APIRouter(
    prefix="/api/participants", tags=["participants"], dependencies=[Depends(enforce_rate_limit)]
)


@router.post("", response_model=ParticipantOut, status_code=status.HTTP_201_CREATED)
def create_participant(payload: ParticipantCreate, db: Session = Depends(get_db)):
    return participant_service.create_participant(db, payload)


@router.get("", response_model=ParticipantPage)
def list_participants(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    name: str | None = Query(None, min_length=1, max_length=100),
    email: EmailStr | None = Query(None),
    db: Session = Depends(get_db),
):
    return participant_service.list_participants(db, page=page, limit=limit, name=name, email=email)


@router.get("/{participant_id}", response_model=ParticipantOut)
def get_participant(participant_id: UUID4, db: Session = Depends(get_db)):
    return participant_service.get_participant(db, participant_id)


@router.patch("/{participant_id}", response_model=ParticipantOut)
def update_participant(participant_id: UUID4, payload: ParticipantUpdate, db: Session = Depends(get_db)):
    return participant_service.update_participant(db, participant_id, payload)


@router.delete("/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_participant(participant_id: UUID4, db: Session = Depends(get_db)):
    participant_service.delete_participant(db, participant_id)
