"""Booking workflow blueprint."""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, request
from wtforms import Field, IntegerField, StringField
from wtforms.validators import Email, InputRequired, Length, NumberRange, Optional

from ..extensions import limiter
from ..services import booking_service
from ..services.booking_service import BookingRequest
from .auth import ApiForm, admin_required
from .responses import int_arg, respond, validated

bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


class IsoDateTimeField(Field):
    """Accepts ISO-8601 strings such as ``2025-05-01T10:00:00Z``."""

    def _value(self) -> str:
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] in (None, ""):
            return
        raw = valuelist[0]
        if not isinstance(raw, str):
            self.data = None
            raise ValueError(self.gettext("Not a valid datetime value."))
        try:
            self.data = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            self.data = None
            raise ValueError(self.gettext("Not a valid datetime value."))


class BookingRequestForm(ApiForm):
    """Form to request a reservation."""

    room_id = StringField("Room", validators=[InputRequired()])
    user_name = StringField("Name", validators=[InputRequired(), Length(max=120)])
    user_email = StringField("Email", validators=[InputRequired(), Email(), Length(max=255)])
    purpose = StringField("Purpose", validators=[InputRequired(), Length(max=500)])
    attendees = IntegerField("Attendees", validators=[InputRequired(), NumberRange(min=1)])
    start_time = IsoDateTimeField("Start", validators=[InputRequired(message="Please provide a start time.")])
    end_time = IsoDateTimeField("End", validators=[InputRequired(message="Please provide an end time.")])


class BookingUpdateForm(ApiForm):
    room_id = StringField("Room", validators=[Optional()])
    start_time = IsoDateTimeField("Start", validators=[Optional()])
    end_time = IsoDateTimeField("End", validators=[Optional()])
    status = StringField("Status", validators=[Optional()])
    purpose = StringField("Purpose", validators=[Optional(), Length(max=500)])


def _booking_rate_limit() -> str:
    return current_app.config["BOOKING_RATE_LIMIT"]


@bp.route("", methods=["GET"])
def list_bookings():
    """Bookings with live overtime fields; filter by room_id and status."""

    views = booking_service.list_bookings(
        room_id=request.args.get("room_id") or None,
        status=request.args.get("status") or None,
        page=int_arg("page", 1),
        limit=int_arg("limit", current_app.config["DEFAULT_PAGE_SIZE"]),
    )
    return respond([view.to_dict() for view in views], "Bookings retrieved.")


@bp.route("/<booking_id>", methods=["GET"])
def booking_detail(booking_id: str):
    view = booking_service.get_booking(booking_id)
    return respond(view.to_dict(), "Booking retrieved.")


@bp.route("", methods=["POST"])
@limiter.limit(_booking_rate_limit)
def create():
    """Create a pending booking. Public, but rate limited per client address."""

    form = validated(BookingRequestForm())
    booking = booking_service.create_booking(
        BookingRequest(
            room_id=form.room_id.data,
            user_name=form.user_name.data,
            user_email=form.user_email.data,
            purpose=form.purpose.data,
            attendees=form.attendees.data,
            start_datetime=form.start_time.data,
            end_datetime=form.end_time.data,
        )
    )
    return respond(booking.to_dict(), "Booking created.", 201)


@bp.route("/<booking_id>/approve", methods=["PATCH"])
@admin_required
def approve(booking_id: str):
    booking = booking_service.approve_booking(booking_id)
    return respond(booking.to_dict(), "Booking approved.")


@bp.route("/<booking_id>/reject", methods=["PATCH"])
@admin_required
def reject(booking_id: str):
    booking = booking_service.reject_booking(booking_id)
    return respond(booking.to_dict(), "Booking rejected.")


@bp.route("/<booking_id>", methods=["PUT"])
@admin_required
def update(booking_id: str):
    """Overwrite the provided fields without re-running conflict checks."""

    form = validated(BookingUpdateForm())
    booking = booking_service.update_booking(
        booking_id,
        room_id=form.room_id.data or None,
        start_datetime=form.start_time.data,
        end_datetime=form.end_time.data,
        status=form.status.data or None,
        purpose=form.purpose.data or None,
    )
    return respond(booking.to_dict(), "Booking updated.")


@bp.route("/<booking_id>", methods=["DELETE"])
@admin_required
def delete(booking_id: str):
    booking_service.delete_booking(booking_id)
    return respond(None, "Booking deleted.")


@bp.route("/delete/<token>", methods=["DELETE"])
def delete_by_token(token: str):
    """Release a booking with the checkout token from its QR code."""

    booking_service.delete_booking_by_token(token)
    return respond(None, "Booking deleted.")
