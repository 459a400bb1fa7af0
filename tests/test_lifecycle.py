"""Booking lifecycle tests: validation order, moderation, updates and deletion."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from meeting_rooms.data_access import bookings_dao
from meeting_rooms.errors import (
    AlreadyApprovedError,
    AlreadyRejectedError,
    CapacityError,
    NotFoundError,
    ValidationError,
)
from meeting_rooms.services import booking_service
from meeting_rooms.services.booking_service import BookingRequest

START = datetime(2030, 6, 3, 9, 0)
END = datetime(2030, 6, 3, 10, 0)


def test_new_booking_is_pending_with_token(make_booking, room_a):
    booking = make_booking(START, END, attendees=5)

    assert booking.status == "pending"
    assert booking.room_id == room_a.room_id
    assert booking.room_name == "Room A"
    assert len(booking.checkout_token) >= 43
    uuid.UUID(booking.booking_id)


def test_capacity_checked_before_interval(make_booking):
    """An oversized request with a backwards interval reports capacity first."""

    with pytest.raises(CapacityError):
        make_booking(END, START, attendees=11)

    with pytest.raises(ValidationError):
        make_booking(END, START, attendees=10)


def test_zero_length_interval_rejected(make_booking):
    with pytest.raises(ValidationError):
        make_booking(START, START)


def test_unknown_room_is_not_found(app):
    with app.app_context():
        with pytest.raises(NotFoundError):
            booking_service.create_booking(
                BookingRequest(
                    room_id=str(uuid.uuid4()),
                    user_name="Dana",
                    user_email="dana@example.com",
                    purpose="Retro",
                    attendees=2,
                    start_datetime=START,
                    end_datetime=END,
                )
            )
        with pytest.raises(ValidationError):
            booking_service.get_booking("not-a-uuid")


def test_aware_datetimes_are_stored_as_utc(make_booking):
    plus_two = timezone(timedelta(hours=2))
    booking = make_booking(START.replace(tzinfo=plus_two), END.replace(tzinfo=plus_two))

    assert booking.start_datetime == datetime(2030, 6, 3, 7, 0)
    assert booking.end_datetime == datetime(2030, 6, 3, 8, 0)


def test_approve_and_reject_transitions(app, make_booking):
    booking = make_booking(START, END)

    with app.app_context():
        approved = booking_service.approve_booking(booking.booking_id)
        assert approved.status == "approved"
        with pytest.raises(AlreadyApprovedError):
            booking_service.approve_booking(booking.booking_id)

        rejected = booking_service.reject_booking(booking.booking_id)
        assert rejected.status == "rejected"
        with pytest.raises(AlreadyRejectedError):
            booking_service.reject_booking(booking.booking_id)

        assert booking_service.approve_booking(booking.booking_id).status == "approved"


def test_moderating_unknown_booking_is_not_found(app):
    with app.app_context():
        with pytest.raises(NotFoundError):
            booking_service.approve_booking(str(uuid.uuid4()))
        with pytest.raises(NotFoundError):
            booking_service.reject_booking(str(uuid.uuid4()))


def test_update_does_not_recheck_conflicts(app, make_booking):
    first = make_booking(START, END)
    second = make_booking(END, END + timedelta(hours=1))

    with app.app_context():
        moved = booking_service.update_booking(
            second.booking_id,
            start_datetime=START,
            end_datetime=END,
            purpose="Moved on top",
        )

    assert moved.start_datetime == first.start_datetime
    assert moved.end_datetime == first.end_datetime
    assert moved.purpose == "Moved on top"
    assert moved.status == "pending"


def test_update_ignores_empty_values_and_validates_status(app, make_booking, room_a):
    booking = make_booking(START, END)

    with app.app_context():
        unchanged = booking_service.update_booking(booking.booking_id, room_id="null", purpose="")
        assert unchanged.room_id == room_a.room_id
        assert unchanged.purpose == booking.purpose

        with pytest.raises(ValidationError):
            booking_service.update_booking(booking.booking_id, status="cancelled")

        assert booking_service.update_booking(booking.booking_id, status="approved").status == "approved"


def test_delete_booking(app, make_booking):
    booking = make_booking(START, END)

    with app.app_context():
        booking_service.delete_booking(booking.booking_id)
        assert bookings_dao.get_booking_by_id(booking.booking_id) is None
        with pytest.raises(NotFoundError):
            booking_service.delete_booking(booking.booking_id)


def test_list_bookings_filters_and_paging(app, make_booking, room_a):
    first = make_booking(START, END)
    make_booking(END, END + timedelta(hours=1))
    make_booking(END + timedelta(hours=1), END + timedelta(hours=2))

    with app.app_context():
        booking_service.approve_booking(first.booking_id)

        views = booking_service.list_bookings(page=0, limit=0)
        assert [view.booking.start_datetime for view in views] == sorted(
            view.booking.start_datetime for view in views
        )
        assert len(views) == 3

        approved = booking_service.list_bookings(status="approved")
        assert [view.booking.booking_id for view in approved] == [first.booking_id]

        page_two = booking_service.list_bookings(room_id=room_a.room_id, page=2, limit=2)
        assert len(page_two) == 1

        ignored_filter = booking_service.list_bookings(room_id="garbage")
        assert len(ignored_filter) == 3


def test_sub_second_interval_is_rejected(make_booking):
    """Times are kept to whole seconds, so this request has no length once stored."""

    with pytest.raises(ValidationError):
        make_booking(datetime(2030, 5, 1, 10, 0, 0, 200000), datetime(2030, 5, 1, 10, 0, 0, 800000))


def test_fractional_seconds_are_truncated(make_booking):
    booking = make_booking(datetime(2030, 5, 1, 10, 0, 0, 250000), datetime(2030, 5, 1, 11, 0, 0, 750000))

    assert booking.start_datetime == datetime(2030, 5, 1, 10, 0)
    assert booking.end_datetime == datetime(2030, 5, 1, 11, 0)


def test_status_change_on_vanished_booking_is_not_found(app, make_booking, monkeypatch):
    booking = make_booking(START, END)

    def delete_instead(booking_id, status):
        bookings_dao.delete_booking(booking_id)

    monkeypatch.setattr(bookings_dao, "update_booking_status", delete_instead)
    with app.app_context():
        with pytest.raises(NotFoundError):
            booking_service.approve_booking(booking.booking_id)
