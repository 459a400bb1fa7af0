"""Data access helpers for the users table."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import bcrypt

from ..models.entities import ROLE_ADMIN, User
from .db import execute, from_db_datetime, get_db, query_one, to_db_datetime

ALLOWED_ROLES = {ROLE_ADMIN}


def _row_to_user(row) -> User:
    return User(
        user_id=row["user_id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=row["role"],
        created_at=from_db_datetime(row["created_at"]),
        reset_otp=row["reset_otp"],
        reset_otp_expiry=from_db_datetime(row["reset_otp_expiry"]),
    )


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_user(username: str, email: str, password_hash: str, role: str = ROLE_ADMIN) -> User:
    """Insert a new user and return the persisted entity."""

    if role not in ALLOWED_ROLES:
        raise ValueError(f"Unsupported role '{role}'")

    db = get_db()
    user_id = str(uuid.uuid4())
    execute(
        db,
        """
        INSERT INTO users (user_id, username, email, password_hash, role, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (user_id, username, email, password_hash, role, to_db_datetime(datetime.now(timezone.utc))),
    )
    return get_user_by_id(user_id, connection=db)


def get_user_by_id(user_id: str, connection=None) -> User | None:
    """Fetch a user by primary key."""

    db = connection or get_db()
    row = query_one(db, "SELECT * FROM users WHERE user_id = ?", (user_id,))
    return _row_to_user(row) if row else None


def get_user_by_username(username: str) -> User | None:
    db = get_db()
    row = query_one(db, "SELECT * FROM users WHERE username = ?", (username,))
    return _row_to_user(row) if row else None


def get_user_by_email(email: str) -> User | None:
    """Fetch a user by unique email address."""

    db = get_db()
    row = query_one(db, "SELECT * FROM users WHERE email = ?", (email,))
    return _row_to_user(row) if row else None


def set_reset_otp(user_id: str, otp: Optional[str], expiry: Optional[datetime]) -> None:
    """Store (or clear, with ``None``) a password-reset code."""

    db = get_db()
    execute(
        db,
        "UPDATE users SET reset_otp = ?, reset_otp_expiry = ? WHERE user_id = ?",
        (otp, to_db_datetime(expiry) if expiry else None, user_id),
    )


def update_password(user_id: str, password_hash: str) -> None:
    """Replace the password hash and clear any pending reset code."""

    db = get_db()
    execute(
        db,
        """
        UPDATE users
        SET password_hash = ?, reset_otp = NULL, reset_otp_expiry = NULL
        WHERE user_id = ?
        """,
        (password_hash, user_id),
    )


def verify_password(stored_hash: str, candidate: str) -> bool:
    """Compare a stored hash against a candidate password."""

    if not stored_hash:
        return False
    return bcrypt.checkpw(candidate.encode("utf-8"), stored_hash.encode("utf-8"))
