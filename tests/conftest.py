"""Shared test fixtures."""
import asyncio
import json
import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is prepared before agenda is imported
_TEST_DB_DIR = tempfile.mkdtemp(prefix="agenda-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'agenda.db'}"
os.environ["SEED_PROFESSIONALS"] = "false"
os.environ["MEETING_PROVIDER"] = "disabled"
os.environ["OUTBOUND_BACKEND"] = "inline"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin-test-pass"
os.environ["STAFF_CREDENTIALS"] = json.dumps({"Dra. Ana Pérez": "ana-pass"})
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from agenda.database import Base, SessionLocal, engine  # noqa: E402
from agenda.errors import ProviderError  # noqa: E402
from agenda.main import app  # noqa: E402
from agenda.models import Professional  # noqa: E402
from agenda.services.dispatcher import OutboundDispatcher  # noqa: E402
from agenda.services.meeting_adapter import MeetingAdapter  # noqa: E402


class FakeMeetingAdapter(MeetingAdapter):
    """Records calls; fails with ProviderError while `fail` is set"""

    def __init__(self, link: str = "https://meet.google.com/abc-defg-hij"):
        self.link = link
        self.fail = False
        self.calls = []

    async def schedule_meeting(self, summary, description, attendee_email, start, end):
        # Yield like a real HTTP call would
        await asyncio.sleep(0)
        self.calls.append(
            {
                "summary": summary,
                "description": description,
                "attendee_email": attendee_email,
                "start": start,
                "end": end,
            }
        )
        if self.fail:
            raise ProviderError("Google account not authorized - visit /auth")
        return self.link


class FakeNotifier:
    def __init__(self):
        self.fail = False
        self.sent = []

    async def send_booking_confirmation(self, booking, professional_name, meeting_link=None):
        if self.fail:
            raise ProviderError("Email service not configured")
        self.sent.append(
            {
                "booking_id": booking.id,
                "to": booking.client_email,
                "professional": professional_name,
                "meeting_link": meeting_link,
            }
        )
        return {"id": f"fake-{booking.id}", "success": True}


@pytest.fixture(autouse=True)
def fresh_schema():
    """Empty tables for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def meeting_adapter():
    return FakeMeetingAdapter()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def dispatcher(meeting_adapter, notifier):
    return OutboundDispatcher(meeting_adapter, notifier, SessionLocal)


@pytest.fixture
def client(meeting_adapter, dispatcher):
    with TestClient(app) as test_client:
        app.state.meeting_adapter = meeting_adapter
        app.state.outbound_dispatcher = dispatcher
        yield test_client


@pytest.fixture
def make_professional(db):
    """Create a professional directly in the database."""

    def _create(name: str = "Dra. Ana Pérez", duration_minutes: int = 30) -> Professional:
        professional = Professional(name=name, duration_minutes=duration_minutes)
        db.add(professional)
        db.commit()
        db.refresh(professional)
        return professional

    return _create


@pytest.fixture
def booking_payload():
    """Valid booking body; override fields per test."""

    def _create(professional_id: int, when: str = "2024-06-10T09:00", **overrides) -> dict:
        payload = {
            "name": "Camila Soto",
            "email": "camila.soto@example.cl",
            "rut": "7.520.873-1",
            "phone": "+56912345678",
            "professional": professional_id,
            "datetime": when,
        }
        payload.update(overrides)
        return payload

    return _create
