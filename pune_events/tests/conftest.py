from datetime import datetime, timedelta
from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from pune_events.core import config
from pune_events.core.session import SessionManager, get_session_manager
from pune_events.database.db import Base, get_db, init_db
from pune_events.main import app
from pune_events.models.events import Event, EventCategory
from pune_events.models.users import Role
from pune_events.services.accounts import sign_up


# File-backed SQLite so that threads get their own connections
@pytest.fixture(scope="session")
def engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database(engine):
    """Fresh tables for every test."""
    init_db(engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(session_factory):
    db: Session = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("pune_events.services.registrations.get_redis_client", lambda: fake_redis)
    monkeypatch.setattr("pune_events.services.events.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture(autouse=True)
def enqueued_reconciles(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    # Celery isn't running in tests; record what would have been enqueued
    calls: list[int] = []
    monkeypatch.setattr("pune_events.tasks.enqueue_reconcile", calls.append)
    return calls


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "PASSWORD_HASH_ROUNDS", 4)


@pytest.fixture
def session_manager(fake_redis) -> SessionManager:
    return SessionManager(fake_redis, ttl_seconds=3600)


@pytest.fixture
def client(session_factory, session_manager):
    def override_get_db():
        db: Session = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_manager] = lambda: session_manager
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session):
    counter = {"n": 0}

    def _make_user(role: Role = Role.ATTENDEE, email: str | None = None, password: str = "secret123"):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return sign_up(db_session, email=email, password=password, role=role)

    return _make_user


@pytest.fixture
def manager(make_user):
    return make_user(Role.EVENT_MANAGER, email="manager@example.com")


@pytest.fixture
def attendee(make_user):
    return make_user(Role.ATTENDEE, email="attendee@example.com")


@pytest.fixture
def auth_headers(session_manager: SessionManager):
    def _auth_headers(user) -> dict[str, str]:
        session = session_manager.sign_in(user.id)
        return {"Authorization": f"Bearer {session.access_token}"}

    return _auth_headers


@pytest.fixture
def make_event(db_session: Session, manager):
    def _make_event(**overrides) -> Event:
        data = {
            "title": "Pune Tech Meetup",
            "description": "An evening of talks about building software in Pune.",
            "category": EventCategory.TECH.value,
            "venue": "Hinjewadi Hall",
            "city": "Pune",
            "event_date": datetime(2026, 12, 1, 18, 0) + timedelta(days=overrides.pop("days_ahead", 0)),
            "max_attendees": None,
            "current_attendees": 0,
            "price": Decimal("0"),
            "is_published": True,
            "manager_id": manager.id,
        }
        data.update(overrides)
        event = Event(**data)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event
