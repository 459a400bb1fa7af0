"""Booking conflict detection tests."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from meeting_rooms.data_access import bookings_dao, rooms_dao
from meeting_rooms.errors import ConflictError
from meeting_rooms.services import booking_rules, booking_service

BASE_START = datetime(2030, 5, 1, 10, 0)
BASE_END = datetime(2030, 5, 1, 11, 0)


def test_intervals_overlap_is_half_open():
    assert booking_rules.intervals_overlap(BASE_START, BASE_END, BASE_START + timedelta(minutes=30), BASE_END)
    assert not booking_rules.intervals_overlap(BASE_START, BASE_END, BASE_END, BASE_END + timedelta(hours=1))
    assert not booking_rules.intervals_overlap(BASE_START, BASE_END, BASE_START - timedelta(hours=1), BASE_START)


def test_conflict_blocks_pending_and_approved(app, make_booking, room_a):
    """Pending and approved bookings should block new overlapping requests."""

    pending = make_booking(BASE_START, BASE_END)

    with pytest.raises(ConflictError):
        make_booking(BASE_START + timedelta(minutes=15), BASE_START + timedelta(minutes=45))

    with app.app_context():
        booking_service.approve_booking(pending.booking_id)
        blocking = bookings_dao.list_blocking_bookings(
            room_a.room_id, BASE_START - timedelta(minutes=30), BASE_START + timedelta(minutes=30)
        )
        assert [booking.booking_id for booking in blocking] == [pending.booking_id]

    with pytest.raises(ConflictError):
        make_booking(BASE_START - timedelta(minutes=30), BASE_START + timedelta(minutes=30))


def test_touching_intervals_do_not_conflict(make_booking):
    make_booking(BASE_START, BASE_END)

    after = make_booking(BASE_END, BASE_END + timedelta(hours=1))
    before = make_booking(BASE_START - timedelta(hours=1), BASE_START)

    assert after.status == "pending"
    assert before.status == "pending"


def test_rejected_booking_frees_the_slot(app, make_booking):
    first = make_booking(BASE_START, BASE_END)
    with app.app_context():
        booking_service.reject_booking(first.booking_id)

    second = make_booking(BASE_START, BASE_END)
    assert second.booking_id != first.booking_id


def test_other_rooms_are_unaffected(app, make_booking):
    make_booking(BASE_START, BASE_END)
    with app.app_context():
        board_room = rooms_dao.get_room_by_name("Board Room")

    booking = make_booking(BASE_START, BASE_END, room=board_room)
    assert booking.room_id == board_room.room_id
