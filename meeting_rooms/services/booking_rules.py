"""Pure booking rules: interval overlap, status transitions and overtime.

Nothing in this module touches the database or the clock; callers pass in
the bookings and the current time they want evaluated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Tuple

from ..errors import AlreadyApprovedError, AlreadyRejectedError, ValidationError
from ..models.entities import (
    BLOCKING_STATUSES,
    BOOKING_STATUSES,
    STATUS_APPROVED,
    STATUS_REJECTED,
    Booking,
)


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open ``[start, end)`` overlap; touching endpoints do not overlap."""

    return start_a < end_b and start_b < end_a


def has_conflict(start: datetime, end: datetime, bookings: Iterable[Booking]) -> bool:
    """Return True when ``[start, end)`` overlaps any pending/approved booking."""

    return any(
        booking.status in BLOCKING_STATUSES
        and intervals_overlap(start, end, booking.start_datetime, booking.end_datetime)
        for booking in bookings
    )


def validate_interval(start: datetime, end: datetime) -> None:
    if start >= end:
        raise ValidationError("End time must be after start time.")


def validate_status(status: str) -> None:
    if status not in BOOKING_STATUSES:
        raise ValidationError(f"Unknown booking status '{status}'.")


def ensure_can_approve(booking: Booking) -> None:
    """Approval is allowed from pending or rejected."""

    if booking.status == STATUS_APPROVED:
        raise AlreadyApprovedError()


def ensure_can_reject(booking: Booking) -> None:
    """Rejection is allowed from pending or approved."""

    if booking.status == STATUS_REJECTED:
        raise AlreadyRejectedError()


def overtime(booking: Booking, now: datetime) -> Tuple[bool, int]:
    """Return ``(is_overtime, overtime_minutes)`` for ``booking`` at ``now``.

    Only approved bookings can run over; minutes are truncated.
    """

    if booking.status != STATUS_APPROVED or not now > booking.end_datetime:
        return False, 0
    elapsed = now - booking.end_datetime
    return True, int(elapsed.total_seconds() // 60)
