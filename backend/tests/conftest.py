"""Pytest fixtures: throw-away SQLite database and a recording mailer."""
import re
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from event_manager.database import Base, get_db
from event_manager.main import app
from event_manager.services.notification_service import Mailer, get_mailer

# Import all models so they register with Base.metadata
from event_manager.models.user import User, UserRole                 # noqa: F401
from event_manager.models.event import Event                         # noqa: F401
from event_manager.models.participant import Participant             # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
DEFAULT_PASSWORD = "correct-horse-battery"


class RecordingMailer(Mailer):
    """Mailer whose transport appends to ``sent`` instead of talking SMTP."""

    def __init__(self):
        super().__init__(host="smtp.test", sender="test@example.com")
        self.sent = []

    def _deliver(self, email):
        self.build_message(email)
        self.sent.append(email)

    def to(self, address: str) -> list:
        return [m for m in self.sent if m.to == address]


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for direct assertions / setup."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def mailer():
    return RecordingMailer()


@pytest.fixture(scope="function")
def client(db_engine, mailer):
    """FastAPI TestClient with the database and mailer dependencies overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(client: TestClient, name: str = "Test User", email: str = "user@example.com",
                  password: str = DEFAULT_PASSWORD) -> dict:
    """POST /api/users/register and return response JSON."""
    resp = client.post("/api/users/register", json={
        "name": name,
        "email": email,
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def extract_token(mailer: RecordingMailer, address: str, marker: str) -> str:
    """Pull the token out of the newest link containing ``marker`` sent to ``address``."""
    for message in reversed(mailer.to(address)):
        match = re.search(rf"/{marker}/([A-Za-z0-9_\-\.]+)", message.text)
        if match:
            return match.group(1)
    raise AssertionError(f"no {marker} link sent to {address}")


def create_verified_user(client: TestClient, mailer: RecordingMailer, name: str = "Test User",
                         email: str = "user@example.com", password: str = DEFAULT_PASSWORD) -> dict:
    """Register, verify and log in; returns the login JSON plus ``headers``."""
    register_user(client, name=name, email=email, password=password)
    token = extract_token(mailer, email, "verify-email")
    resp = client.get(f"/api/users/verify-email/{token}")
    assert resp.status_code == 200, resp.text
    resp = client.post("/api/users/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    data["headers"] = auth(data["token"])
    return data


def promote_to_admin(db, user_id: str) -> None:
    user = db.query(User).filter(User.user_id == user_id).first()
    user.role = UserRole.admin
    db.commit()


def create_admin(client: TestClient, mailer: RecordingMailer, db, name: str = "Admin",
                 email: str = "admin@example.com") -> dict:
    admin = create_verified_user(client, mailer, name=name, email=email)
    promote_to_admin(db, admin["userId"])
    return admin


def create_test_event(client: TestClient, headers: dict, title: str = "Test Event",
                      days_ahead: float = 7, location: str = "Main Hall",
                      description: str = "A test event") -> dict:
    """POST /api/events and return response JSON."""
    date = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    resp = client.post("/api/events/", headers=headers, json={
        "title": title,
        "description": description,
        "location": location,
        "date": date.isoformat(),
    })
    assert resp.status_code == 201, resp.text
    return resp.json()
