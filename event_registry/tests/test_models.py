"""
Test database models (Event, Participant and the registration join table).
"""
import uuid

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_registry.models.events import Event
from event_registry.models.participants import Participant
from event_registry.models.registrations import Registration


def registration_count(db: Session, **filters) -> int:
    stmt = select(func.count()).select_from(Registration).filter_by(**filters)
    return db.scalar(stmt)


class TestEventModel:
    """Test the Event model."""

    def test_create_event(self, make_event):
        """Test creating an event assigns a UUID and timestamps."""
        event = make_event(title="Test Event", capacity=100)

        assert isinstance(event.id, uuid.UUID)
        assert event.id.version == 4
        assert event.title == "Test Event"
        assert event.capacity == 100
        assert event.created_at is not None
        assert event.updated_at is not None

    def test_capacity_must_be_positive(self, db_session: Session, make_event):
        """Test the check constraint rejects a zero capacity."""
        with pytest.raises(IntegrityError):
            make_event(title="Empty", capacity=0)
        db_session.rollback()

    def test_event_relationship_with_registrations(self, db_session: Session, make_event,
                                                   make_participant, make_registration):
        """Test the relationship between Event and Registration."""
        event = make_event(title="Concert", capacity=50)
        make_registration(event, make_participant())
        make_registration(event, make_participant())

        db_session.refresh(event)

        assert len(event.registrations) == 2
        assert all(r.event_id == event.id for r in event.registrations)


class TestParticipantModel:
    """Test the Participant model."""

    def test_email_is_unique(self, db_session: Session, make_participant):
        """Test the unique constraint on email."""
        make_participant(email="ada@example.com")

        with pytest.raises(IntegrityError):
            make_participant(name="Other Ada", email="ada@example.com")
        db_session.rollback()


class TestRegistrationModel:
    """Test the registration join table."""

    def test_create_registration(self, make_event, make_participant, make_registration):
        """Test creating a registration sets registered_at."""
        event = make_event()
        participant = make_participant()

        registration = make_registration(event, participant)

        assert registration.event_id == event.id
        assert registration.participant_id == participant.id
        assert registration.registered_at is not None
        assert registration.event.title == event.title
        assert registration.participant.email == participant.email

    def test_pair_is_unique(self, db_session: Session, make_event, make_participant, make_registration):
        """Test the composite primary key rejects a second row for the same pair."""
        event = make_event()
        participant = make_participant()
        make_registration(event, participant)
        db_session.expunge_all()

        db_session.add(Registration(event_id=event.id, participant_id=participant.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

        assert registration_count(db_session, event_id=event.id) == 1

    def test_deleting_event_cascades_in_database(self, db_session: Session, make_event,
                                                 make_participant, make_registration):
        """Test ON DELETE CASCADE removes registrations without the ORM's help."""
        event = make_event()
        participant = make_participant()
        make_registration(event, participant)

        db_session.execute(delete(Event).where(Event.id == event.id))
        db_session.commit()

        assert registration_count(db_session, event_id=event.id) == 0
        assert db_session.scalar(select(func.count()).select_from(Participant)) == 1

    def test_deleting_participant_cascades(self, db_session: Session, make_event,
                                           make_participant, make_registration):
        """Test deleting a participant removes every registration it had."""
        participant = make_participant()
        for i in range(3):
            make_registration(make_event(title=f"Event {i}"), participant)

        db_session.delete(participant)
        db_session.commit()

        assert registration_count(db_session, participant_id=participant.id) == 0
        assert db_session.scalar(select(func.count()).select_from(Event)) == 3
