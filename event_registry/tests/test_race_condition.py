"""
Test that concurrent registrations cannot over-book an event.

Every worker thread uses its own session (and therefore its own database
connection), the same way concurrent requests do.
"""
from concurrent.futures import ThreadPoolExecutor
from uuid import UUID

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from event_registry.core.errors import CapacityExceededError, DomainError, DuplicateRegistrationError
from event_registry.models.registrations import Registration
from event_registry.services import registrations as registration_service


def attempt(session_factory: sessionmaker[Session], event_id: UUID, participant_id: UUID) -> str:
    """Try to register; returns "ok" or the error class name."""
    db = session_factory()
    try:
        registration_service.register_participant(db, event_id=event_id, participant_id=participant_id)
        return "ok"
    except DomainError as e:
        return type(e).__name__
    finally:
        db.close()


def run_concurrently(session_factory, event_id, participant_ids) -> list[str]:
    with ThreadPoolExecutor(max_workers=len(participant_ids)) as executor:
        futures = [executor.submit(attempt, session_factory, event_id, pid) for pid in participant_ids]
        return [f.result() for f in futures]


def stored_registrations(db: Session, event_id: UUID) -> int:
    return db.scalar(
        select(func.count()).select_from(Registration).where(Registration.event_id == event_id)
    )


class TestConcurrentRegistration:
    """Test capacity and uniqueness under concurrent registration."""

    def test_last_seat_goes_to_exactly_one(self, db_session: Session, session_factory,
                                           make_event, make_participant):
        """Test ten concurrent attempts at a capacity=1 event."""
        event = make_event(title="Race Event", capacity=1)
        participant_ids = [make_participant().id for _ in range(10)]

        results = run_concurrently(session_factory, event.id, participant_ids)

        assert results.count("ok") == 1
        assert results.count(CapacityExceededError.__name__) == 9
        assert stored_registrations(db_session, event.id) == 1

    def test_capacity_respected_under_load(self, db_session: Session, session_factory,
                                           make_event, make_participant):
        """Test ten concurrent attempts at a capacity=3 event."""
        event = make_event(title="Popular Event", capacity=3)
        participant_ids = [make_participant().id for _ in range(10)]

        results = run_concurrently(session_factory, event.id, participant_ids)

        assert results.count("ok") == 3
        assert results.count(CapacityExceededError.__name__) == 7
        assert stored_registrations(db_session, event.id) == 3

    def test_two_attempts_at_one_remaining_seat(self, db_session: Session, session_factory,
                                                make_event, make_participant, make_registration):
        """Test two simultaneous attempts when capacity - 1 seats are taken."""
        event = make_event(capacity=2)
        make_registration(event, make_participant())
        participant_ids = [make_participant().id, make_participant().id]

        results = run_concurrently(session_factory, event.id, participant_ids)

        assert sorted(results) == sorted(["ok", CapacityExceededError.__name__])
        assert stored_registrations(db_session, event.id) == 2

    def test_same_pair_registered_once(self, db_session: Session, session_factory,
                                       make_event, make_participant):
        """Test concurrent duplicate registrations of one participant."""
        event = make_event(capacity=10)
        participant_id = make_participant().id

        results = run_concurrently(session_factory, event.id, [participant_id] * 5)

        assert results.count("ok") == 1
        assert results.count(DuplicateRegistrationError.__name__) == 4
        assert stored_registrations(db_session, event.id) == 1

    def test_concurrent_api_registrations(self, client: TestClient, db_session: Session,
                                          make_event, make_participant):
        """Test concurrent HTTP requests don't over-book."""
        event = make_event(title="Concurrent Event", capacity=3)
        participant_ids = [make_participant().id for _ in range(10)]

        def register_via_api(participant_id: UUID) -> int:
            response = client.post(f"/api/events/{event.id}/participants/{participant_id}")
            return response.status_code

        with ThreadPoolExecutor(max_workers=10) as executor:
            statuses = list(executor.map(register_via_api, participant_ids))

        assert statuses.count(201) == 3
        assert statuses.count(409) == 7
        assert stored_registrations(db_session, event.id) == 3
