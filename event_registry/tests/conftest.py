from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from event_registry.core.config import Settings
from event_registry.database.db import Base, create_db_engine, make_session_factory
from event_registry.main import create_app
# Import models so that they register with Base.metadata
from event_registry.models.events import Event
from event_registry.models.participants import Participant
from event_registry.models.registrations import Registration


def future(days: int = 30) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest.fixture
def settings(tmp_path) -> Settings:
    # A file database, so that concurrent sessions get their own connections
    return Settings(
        environment="test",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        rate_limit_enabled=False,
    )


@pytest.fixture
def engine(settings: Settings) -> Engine:
    engine = create_db_engine(settings.database_url, timeout=settings.database_timeout)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Session:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def client(settings: Settings, engine: Engine, fake_redis) -> TestClient:
    app = create_app(settings, engine=engine, redis_client=fake_redis)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_event(db_session: Session) -> Callable[..., Event]:
    """Insert an event row directly, bypassing the service checks."""

    def _make(title: str = "Conf", capacity: int = 10, **fields) -> Event:
        event = Event(
            title=title,
            description=fields.pop("description", f"{title} description"),
            event_date=fields.pop("event_date", future()),
            capacity=capacity,
            **fields,
        )
        db_session.add(event)
        db_session.commit()
        return event

    return _make


@pytest.fixture
def make_participant(db_session: Session) -> Callable[..., Participant]:
    counter = iter(range(1, 10_000))

    def _make(name: str = "Ada Lovelace", email: str | None = None) -> Participant:
        participant = Participant(name=name, email=email or f"person{next(counter)}@example.com")
        db_session.add(participant)
        db_session.commit()
        return participant

    return _make


@pytest.fixture
def make_registration(db_session: Session) -> Callable[[Event, Participant], Registration]:
    def _make(event: Event, participant: Participant) -> Registration:
        registration = Registration(event_id=event.id, participant_id=participant.id)
        db_session.add(registration)
        db_session.commit()
        return registration

    return _make
