"""Data access helpers for bookings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.entities import BLOCKING_STATUSES, Booking
from .db import execute, from_db_datetime, get_db, query_all, query_one, to_db_datetime

_SELECT_WITH_ROOM = """
    SELECT b.*, r.name AS room_name
    FROM bookings b
    LEFT JOIN rooms r ON r.room_id = b.room_id
"""


def _row_to_booking(row) -> Booking:
    row_keys = row.keys() if hasattr(row, "keys") else ()
    room_name = row["room_name"] if "room_name" in row_keys else None

    return Booking(
        booking_id=row["booking_id"],
        room_id=row["room_id"],
        user_name=row["user_name"],
        user_email=row["user_email"],
        purpose=row["purpose"] or "",
        attendees=row["attendees"],
        start_datetime=from_db_datetime(row["start_datetime"]),
        end_datetime=from_db_datetime(row["end_datetime"]),
        status=row["status"],
        checkout_token=row["checkout_token"],
        created_at=from_db_datetime(row["created_at"]),
        room_name=room_name,
    )


def insert_booking(booking: Booking) -> Booking:
    """Persist a fully-formed booking. Validation happens in the service layer."""

    db = get_db()
    execute(
        db,
        """
        INSERT INTO bookings (
            booking_id, room_id, user_name, user_email, purpose, attendees,
            start_datetime, end_datetime, status, checkout_token, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            booking.booking_id,
            booking.room_id,
            booking.user_name,
            booking.user_email,
            booking.purpose,
            booking.attendees,
            to_db_datetime(booking.start_datetime),
            to_db_datetime(booking.end_datetime),
            booking.status,
            booking.checkout_token,
            to_db_datetime(booking.created_at),
        ),
    )
    return get_booking_by_id(booking.booking_id, connection=db)


def get_booking_by_id(booking_id: str, connection=None) -> Booking | None:
    """Fetch a specific booking."""

    db = connection or get_db()
    row = query_one(db, _SELECT_WITH_ROOM + " WHERE b.booking_id = ?", (booking_id,))
    return _row_to_booking(row) if row else None


def update_booking_status(booking_id: str, status: str) -> None:
    """Write a new status value."""

    db = get_db()
    execute(
        db,
        "UPDATE bookings SET status = ? WHERE booking_id = ?",
        (status, booking_id),
    )


def update_booking(booking_id: str, **fields) -> None:
    """Overwrite the provided mutable fields of a booking."""

    allowed = {"room_id", "start_datetime", "end_datetime", "status", "purpose"}
    updates = {}
    for key, value in fields.items():
        if key not in allowed:
            continue
        updates[key] = to_db_datetime(value) if isinstance(value, datetime) else value
    if not updates:
        return

    columns = ", ".join(f"{key} = ?" for key in updates.keys())
    params = list(updates.values()) + [booking_id]
    db = get_db()
    execute(db, f"UPDATE bookings SET {columns} WHERE booking_id = ?", params)


def delete_booking(booking_id: str) -> int:
    db = get_db()
    cursor = execute(db, "DELETE FROM bookings WHERE booking_id = ?", (booking_id,))
    return cursor.rowcount


def delete_booking_by_token(token: str) -> int:
    """Delete the booking holding ``token``; returns the number of rows removed."""

    db = get_db()
    cursor = execute(db, "DELETE FROM bookings WHERE checkout_token = ?", (token,))
    return cursor.rowcount


def delete_bookings_ending_before(threshold: datetime) -> int:
    """Purge every booking whose end time is older than ``threshold``."""

    db = get_db()
    cursor = execute(
        db,
        "DELETE FROM bookings WHERE end_datetime < ?",
        (to_db_datetime(threshold),),
    )
    return cursor.rowcount


def list_bookings(
    room_id: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> list[Booking]:
    """Return a page of bookings, optionally filtered by room and status."""

    db = get_db()
    query = _SELECT_WITH_ROOM + " WHERE 1 = 1"
    params: list = []
    if room_id:
        query += " AND b.room_id = ?"
        params.append(room_id)
    if status:
        query += " AND b.status = ?"
        params.append(status)
    query += " ORDER BY b.start_datetime ASC LIMIT ? OFFSET ?"
    params.extend([limit, (page - 1) * limit])
    rows = query_all(db, query, params)
    return [_row_to_booking(row) for row in rows]


def list_bookings_for_room(room_id: str) -> list[Booking]:
    """Return every booking for a specific room."""

    db = get_db()
    rows = query_all(
        db,
        _SELECT_WITH_ROOM + " WHERE b.room_id = ? ORDER BY b.start_datetime ASC",
        (room_id,),
    )
    return [_row_to_booking(row) for row in rows]


def list_blocking_bookings(room_id: str, start: datetime, end: datetime) -> list[Booking]:
    """Pending/approved bookings on ``room_id`` whose interval overlaps ``[start, end)``."""

    db = get_db()
    placeholders = ", ".join("?" for _ in BLOCKING_STATUSES)
    rows = query_all(
        db,
        f"""
        SELECT * FROM bookings
        WHERE room_id = ?
          AND status IN ({placeholders})
          AND start_datetime < ?
          AND end_datetime > ?
        """,
        [room_id, *BLOCKING_STATUSES, to_db_datetime(end), to_db_datetime(start)],
    )
    return [_row_to_booking(row) for row in rows]
