import os
from datetime import datetime, timedelta, timezone

# Keep the application's own engine off disk; tests bind their own below.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.database.db import Base, get_db
from app.main import app
from app.models.events import Event


@pytest.fixture
def engine(tmp_path):
    """A fresh file-backed SQLite database per test, shareable across threads."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session: Session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch):
    """Route the ledger's per-event locks to an in-process fake Redis."""
    monkeypatch.setattr("app.services.registrations.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "REGISTRATION_RETRY_BACKOFF", 0.0)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_event(db_session):
    """Insert an event directly, bypassing the service layer."""

    def _make_event(capacity: int = 10, seat_count: int = 0, owner_id: int = 100, title: str = "Meetup") -> Event:
        event = Event(
            title=title,
            description="",
            event_date=datetime.now(timezone.utc) + timedelta(days=7),
            location="Main Hall",
            capacity=capacity,
            seat_count=seat_count,
            owner_id=owner_id,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


def user_headers(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id), "X-User-Role": "user"}


def organizer_headers(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id), "X-User-Role": "organizer"}


@pytest.fixture
def as_user():
    return user_headers


@pytest.fixture
def as_organizer():
    return organizer_headers
