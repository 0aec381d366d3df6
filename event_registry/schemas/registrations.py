from uuid import UUID

from event_registry.schemas.common import CamelModel, Page, PaginationMeta, UTCDateTime
from event_registry.schemas.events import EventOut
from event_registry.schemas.participants import EventParticipantOut, ParticipantOut


class RegistrationOut(CamelModel):
    event_id: UUID
    participant_id: UUID
    registered_at: UTCDateTime
    event: EventOut
    participant: ParticipantOut


class EventParticipantsPagination(PaginationMeta):
    remaining_capacity: int


class EventParticipantPage(Page[EventParticipantOut]):
    pagination: EventParticipantsPagination
