import re
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from event_registry.schemas.common import CamelModel, Page, UTCDateTime

# Any Unicode letter, whitespace, apostrophe or hyphen.
NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|[\s'-])+$")
EMAIL_MAX_LENGTH = 255


def _check_name(value: str) -> str:
    if not NAME_PATTERN.match(value):
        raise ValueError("Name contains invalid characters")
    return value


def _normalize_email(value):
    if not isinstance(value, str):
        return value
    value = value.strip().lower()
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must be less than {EMAIL_MAX_LENGTH} characters")
    return value


class ParticipantCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("name")
    @classmethod
    def name_characters(cls, value):
        return _check_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)


class ParticipantUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: EmailStr | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("name")
    @classmethod
    def name_characters(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return _check_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return _normalize_email(value)


class ParticipantOut(CamelModel):
    id: UUID
    name: str
    email: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class EventParticipantOut(ParticipantOut):
    """A participant as listed under an event."""

    registered_at: UTCDateTime


class ParticipantPage(Page[ParticipantOut]):
    pass
