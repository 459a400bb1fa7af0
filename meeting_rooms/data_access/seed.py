"""Deterministic seed data for the meeting room service."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from .db import execute, get_db, to_db_datetime
from .users_dao import hash_password

SEED_PASSWORD = "Password123!"

SEED_ADMINS = [
    ("facilities", "facilities@example.com"),
]

SEED_ROOMS = [
    ("Room A", "Ground floor meeting room with a projector.", 10),
    ("Board Room", "Executive board room with video conferencing.", 20),
    ("Focus Pod", "Two-person pod for calls and pairing.", 2),
]


def seed() -> None:
    """Populate the database with representative demo records."""

    db = get_db()
    created_at = to_db_datetime(datetime.now(timezone.utc))

    for username, email in SEED_ADMINS:
        execute(
            db,
            """
            INSERT OR IGNORE INTO users (user_id, username, email, password_hash, role, created_at)
            VALUES (?, ?, ?, ?, 'admin', ?)
            """,
            (str(uuid.uuid4()), username, email, hash_password(SEED_PASSWORD), created_at),
        )

    for name, description, capacity in SEED_ROOMS:
        execute(
            db,
            """
            INSERT OR IGNORE INTO rooms (room_id, name, description, capacity)
            VALUES (?, ?, ?, ?)
            """,
            (str(uuid.uuid4()), name, description, capacity),
        )
