from fastapi import APIRouter, Depends, Query, status
from pydantic import UUID4
from sqlalchemy.orm import Session

from event_registry.core.rate_limit import enforce_rate_limit
from event_registry.database.db import get_db
from event_registry.schemas.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from event_registry.schemas.events import (
    EventCreate,
    EventOut,
    EventPage,
    EventSortField,
    EventUpdate,
    SortOrder,
)
from event_registry.services import events as event_service

router = APIRouter(prefix="/api/events", tags=["events"], dependencies=[Depends(enforce_rate_limit)])


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    return event_service.create_event(db, payload)


@router.get("", response_model=EventPage)
def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: EventSortField = Query(event_service.DEFAULT_SORT_BY, alias="sortBy"),
    sort_order: SortOrder = Query(event_service.DEFAULT_SORT_ORDER, alias="sortOrder"),
    db: Session = Depends(get_db),
):
    return event_service.list_events(db, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: UUID4, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.api_route("/{event_id}", methods=["PUT", "PATCH"], response_model=EventOut)
def update_event(event_id: UUID4, payload: EventUpdate, db: Session = Depends(get_db)):
    """Partial update: only the supplied fields change."""
    return event_service.update_event(db, event_id, payload)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: UUID4, db: Session = Depends(get_db)):
    event_service.delete_event(db, event_id)
