"""Data access helpers for meeting rooms."""

from __future__ import annotations

import uuid
from typing import Optional

from ..models.entities import Room
from .db import execute, get_db, query_all, query_one


def _row_to_room(row) -> Room:
    return Room(
        room_id=row["room_id"],
        name=row["name"],
        description=row["description"] or "",
        capacity=row["capacity"],
    )


def create_room(name: str, capacity: int, description: str = "") -> Room:
    """Insert a new room. Duplicate names raise sqlite3.IntegrityError."""

    db = get_db()
    room_id = str(uuid.uuid4())
    execute(
        db,
        """
        INSERT INTO rooms (room_id, name, description, capacity)
        VALUES (?, ?, ?, ?)
        """,
        (room_id, name, description or "", capacity),
    )
    return get_room_by_id(room_id, connection=db)


def get_room_by_id(room_id: str, connection=None) -> Room | None:
    """Fetch a single room."""

    db = connection or get_db()
    row = query_one(db, "SELECT * FROM rooms WHERE room_id = ?", (room_id,))
    return _row_to_room(row) if row else None


def get_room_by_name(name: str) -> Room | None:
    db = get_db()
    row = query_one(db, "SELECT * FROM rooms WHERE name = ?", (name,))
    return _row_to_room(row) if row else None


def update_room(room_id: str, **fields) -> None:
    """Update mutable fields for a room."""

    allowed = {"name", "description", "capacity"}
    updates = {key: value for key, value in fields.items() if key in allowed}
    if not updates:
        return

    columns = ", ".join(f"{key} = ?" for key in updates.keys())
    params = list(updates.values()) + [room_id]
    db = get_db()
    execute(db, f"UPDATE rooms SET {columns} WHERE room_id = ?", params)


def delete_room(room_id: str) -> int:
    """Remove a room. Bookings referencing it are left untouched."""

    db = get_db()
    cursor = execute(db, "DELETE FROM rooms WHERE room_id = ?", (room_id,))
    return cursor.rowcount


def list_rooms(name: Optional[str] = None, page: int = 1, limit: int = 10) -> list[Room]:
    """Return rooms ordered by name, optionally filtered by a name fragment."""

    db = get_db()
    query = "SELECT * FROM rooms"
    params: list = []
    if name:
        query += " WHERE name LIKE ?"
        params.append(f"%{name}%")
    query += " ORDER BY name ASC LIMIT ? OFFSET ?"
    params.extend([limit, (page - 1) * limit])
    rows = query_all(db, query, params)
    return [_row_to_room(row) for row in rows]
