"""Booking lifecycle: creation, moderation, updates, checkout and expiry.

Request handlers call into this module; it validates against the rules in
``booking_rules``, persists through the DAOs and schedules notifications once
the write has been committed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from flask import current_app

from ..data_access import bookings_dao, rooms_dao
from ..errors import CapacityError, ConflictError, NotFoundError, ValidationError
from ..models.entities import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED, Booking, BookingView
from . import booking_rules, checkout, notifications

logger = logging.getLogger(__name__)


@dataclass
class BookingRequest:
    """Validated input for a new reservation."""

    room_id: str
    user_name: str
    user_email: str
    purpose: str
    attendees: int
    start_datetime: datetime
    end_datetime: datetime


def utcnow() -> datetime:
    """Current time as naive UTC, the representation bookings are stored in."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert to naive UTC at whole-second precision, matching what is stored."""

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def parse_id(value: str, label: str = "booking") -> str:
    """Normalise a UUID path/query value or raise ValidationError."""

    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} id format.")


def _notify(build: Callable, *args) -> None:
    """Render and dispatch notifications without letting failures escape."""

    try:
        messages = build(*args)
        if not isinstance(messages, list):
            messages = [messages]
        notifications.get_dispatcher().dispatch_all(messages)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Could not schedule notification via %s", getattr(build, "__name__", build))


def _require_booking(booking_id: str) -> Booking:
    booking = bookings_dao.get_booking_by_id(parse_id(booking_id))
    if booking is None:
        raise NotFoundError("Booking not found.")
    return booking


def build_view(booking: Booking, now: datetime) -> BookingView:
    """Attach overtime fields; overtime bookings get a freshly rendered checkout QR."""

    is_overtime, minutes = booking_rules.overtime(booking, now)
    if not is_overtime:
        return BookingView(booking=booking)
    return BookingView(
        booking=booking,
        is_overtime=True,
        overtime_minutes=minutes,
        extended_until=now,
        qr_code_base64=checkout.checkout_qr_base64(current_app.config["PUBLIC_BASE_URL"], booking.checkout_token),
    )


def create_booking(request: BookingRequest, now: Optional[datetime] = None) -> Booking:
    """Validate and persist a new pending booking."""

    now = now or utcnow()
    room_id = parse_id(request.room_id, "room")
    start = to_naive_utc(request.start_datetime)
    end = to_naive_utc(request.end_datetime)

    room = rooms_dao.get_room_by_id(room_id)
    if room is None:
        raise NotFoundError("Room not found.")
    if request.attendees > room.capacity:
        raise CapacityError(f"Attendees ({request.attendees}) exceed the capacity of {room.name} ({room.capacity}).")
    booking_rules.validate_interval(start, end)

    # Check-then-insert is not atomic; concurrent requests can both pass this check.
    blocking = bookings_dao.list_blocking_bookings(room_id, start, end)
    if booking_rules.has_conflict(start, end, blocking):
        raise ConflictError("The requested time conflicts with an existing booking.")

    booking = bookings_dao.insert_booking(
        Booking(
            booking_id=str(uuid.uuid4()),
            room_id=room_id,
            user_name=request.user_name,
            user_email=request.user_email,
            purpose=request.purpose,
            attendees=request.attendees,
            start_datetime=start,
            end_datetime=end,
            status=STATUS_PENDING,
            checkout_token=checkout.generate_checkout_token(),
            created_at=now,
        )
    )
    logger.info("Booking %s created for room %s", booking.booking_id, room.name)
    _notify(notifications.booking_created_messages, booking, room)
    return booking


def _set_status(booking: Booking, status: str) -> Booking:
    old_status = booking.status
    bookings_dao.update_booking_status(booking.booking_id, status)
    updated = bookings_dao.get_booking_by_id(booking.booking_id)
    if updated is None:
        raise NotFoundError("Booking not found.")
    logger.info("Booking %s moved from %s to %s", booking.booking_id, old_status, status)

    room = rooms_dao.get_room_by_id(updated.room_id)
    if room is None:
        logger.warning("Room %s for booking %s no longer exists; skipping notification", updated.room_id, updated.booking_id)
    else:
        _notify(notifications.status_update_message, updated, room, old_status)
    return updated


def approve_booking(booking_id: str) -> Booking:
    booking = _require_booking(booking_id)
    booking_rules.ensure_can_approve(booking)
    return _set_status(booking, STATUS_APPROVED)


def reject_booking(booking_id: str) -> Booking:
    booking = _require_booking(booking_id)
    booking_rules.ensure_can_reject(booking)
    return _set_status(booking, STATUS_REJECTED)


def update_booking(
    booking_id: str,
    room_id: Optional[str] = None,
    start_datetime: Optional[datetime] = None,
    end_datetime: Optional[datetime] = None,
    status: Optional[str] = None,
    purpose: Optional[str] = None,
) -> Booking:
    """Overwrite whichever fields were provided.

    Conflicts and capacity are not re-checked here, so an update can move a
    booking onto an occupied slot.
    """

    booking = _require_booking(booking_id)
    fields = {}
    if room_id and room_id != "null":
        fields["room_id"] = parse_id(room_id, "room")
    if start_datetime is not None:
        fields["start_datetime"] = to_naive_utc(start_datetime)
    if end_datetime is not None:
        fields["end_datetime"] = to_naive_utc(end_datetime)
    if status:
        booking_rules.validate_status(status)
        fields["status"] = status
    if purpose:
        fields["purpose"] = purpose

    bookings_dao.update_booking(booking.booking_id, **fields)
    logger.info("Booking %s updated (%s)", booking.booking_id, ", ".join(sorted(fields)) or "no changes")
    return bookings_dao.get_booking_by_id(booking.booking_id)


def delete_booking(booking_id: str) -> None:
    booking = _require_booking(booking_id)
    bookings_dao.delete_booking(booking.booking_id)
    logger.info("Booking %s deleted", booking.booking_id)


def delete_booking_by_token(token: str) -> None:
    """Release a booking with its checkout token; no role check applies."""

    if not token or not bookings_dao.delete_booking_by_token(token):
        raise NotFoundError("Booking not found.")
    logger.info("Booking released with checkout token")


def get_booking(booking_id: str, now: Optional[datetime] = None) -> BookingView:
    return build_view(_require_booking(booking_id), now or utcnow())


def list_bookings(
    room_id: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    now: Optional[datetime] = None,
) -> list[BookingView]:
    """Page through bookings with live overtime fields.

    A malformed ``room_id`` filter is ignored rather than rejected.
    """

    now = now or utcnow()
    page = page if page >= 1 else 1
    limit = limit if limit >= 1 else current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    if room_id:
        try:
            room_id = parse_id(room_id, "room")
        except ValidationError:
            room_id = None
    bookings = bookings_dao.list_bookings(room_id=room_id, status=status or None, page=page, limit=limit)
    return [build_view(booking, now) for booking in bookings]


def sweep_expired(retention: timedelta, now: Optional[datetime] = None) -> int:
    """Delete bookings that ended more than ``retention`` ago."""

    threshold = (now or utcnow()) - retention
    deleted = bookings_dao.delete_bookings_ending_before(threshold)
    if deleted:
        logger.info("Auto-deleted %d expired bookings", deleted)
    return deleted
