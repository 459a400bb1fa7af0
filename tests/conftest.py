"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import sys
from typing import Generator, List

import pytest
from flask import Flask

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from meeting_rooms.app import create_app
from meeting_rooms.config import TestingConfig
from meeting_rooms.data_access import rooms_dao, seed, users_dao
from meeting_rooms.data_access.db import get_db, init_db
from meeting_rooms.services import booking_service
from meeting_rooms.services.booking_service import BookingRequest
from meeting_rooms.services.email.base import EmailMessage, EmailSender


class _TestConfig(TestingConfig):
    DATABASE_URL: str = ""


class RecordingEmailSender(EmailSender):
    """Keeps every message instead of delivering it."""

    def __init__(self) -> None:
        self.messages: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> bool:
        self.messages.append(message)
        return True


@pytest.fixture()
def app(tmp_path: Path) -> Generator[Flask, None, None]:
    """Configure a Flask application for testing with a temp SQLite database."""

    db_path = tmp_path / "test.db"
    _TestConfig.DATABASE_URL = f"sqlite:///{db_path}"
    application = create_app(_TestConfig)
    with application.app_context():
        init_db(application)
        seed.seed()
    yield application
    application.extensions["notifications"].shutdown()


@pytest.fixture()
def client(app: Flask):
    """Flask test client."""

    return app.test_client()


@pytest.fixture()
def runner(app: Flask):
    """Flask CLI runner."""

    return app.test_cli_runner()


@pytest.fixture()
def db(app: Flask):
    """Provide a database connection for direct queries."""

    with app.app_context():
        yield get_db()


@pytest.fixture()
def outbox(app: Flask) -> List[EmailMessage]:
    """Messages handed to the email sender during the test."""

    sender = RecordingEmailSender()
    app.extensions["notifications"].sender = sender
    return sender.messages


@pytest.fixture()
def admin_user(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_username("facilities")


@pytest.fixture()
def room_a(app: Flask):
    with app.app_context():
        return rooms_dao.get_room_by_name("Room A")


@pytest.fixture()
def auth_headers(client) -> dict:
    """Bearer header for the seeded administrator."""

    response = client.post(
        "/api/admin/login",
        json={"username": "facilities", "password": seed.SEED_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['data']['token']}"}


@pytest.fixture()
def make_booking(app: Flask, room_a):
    """Create a booking through the lifecycle service, defaulting to Room A."""

    def _make(start: datetime, end: datetime, attendees: int = 4, room=None, email: str = "dana@example.com"):
        target = room or room_a
        with app.app_context():
            return booking_service.create_booking(
                BookingRequest(
                    room_id=target.room_id,
                    user_name="Dana",
                    user_email=email,
                    purpose="Sprint planning",
                    attendees=attendees,
                    start_datetime=start,
                    end_datetime=end,
                )
            )

    return _make
