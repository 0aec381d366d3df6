from enum import Enum
from uuid import UUID

from pydantic import Field, field_validator

from event_registry.core.timeutils import utcnow
from event_registry.schemas.common import CamelModel, Page, UTCDateTime


class EventSortField(str, Enum):
    TITLE = "title"
    EVENT_DATE = "eventDate"
    CREATED_AT = "createdAt"
    CAPACITY = "capacity"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _require_future(value):
    if value <= utcnow():
        raise ValueError("Event date must be in the future")
    return value


class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    event_date: UTCDateTime
    capacity: int = Field(ge=1)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("event_date")
    @classmethod
    def event_date_in_future(cls, value):
        return _require_future(value)


class EventUpdate(CamelModel):
    """Partial update; only fields present in the request are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    event_date: UTCDateTime | None = None
    capacity: int | None = Field(default=None, ge=1)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("title", "description", "event_date", "capacity")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("event_date")
    @classmethod
    def event_date_in_future(cls, value):
        return _require_future(value)


class EventOut(CamelModel):
    id: UUID
    title: str
    description: str
    event_date: UTCDateTime
    capacity: int
    created_at: UTCDateTime
    updated_at: UTCDateTime


class ParticipantEventOut(EventOut):
    """An event as seen from one of its participants."""

    registered_at: UTCDateTime


class EventPage(Page[EventOut]):
    pass


class ParticipantEventPage(Page[ParticipantEventOut]):
    pass
