"""Room catalogue endpoints."""

from __future__ import annotations

import sqlite3

from flask import Blueprint, current_app, request
from wtforms import IntegerField, StringField
from wtforms.validators import InputRequired, Length, NumberRange, Optional

from ..data_access import bookings_dao, rooms_dao
from ..errors import ConflictError, NotFoundError
from ..services.booking_service import parse_id
from .auth import ApiForm, admin_required
from .responses import int_arg, respond, validated

bp = Blueprint("rooms", __name__, url_prefix="/api/rooms")


class RoomForm(ApiForm):
    name = StringField("Name", validators=[InputRequired(), Length(max=120)])
    description = StringField("Description", validators=[Optional(), Length(max=1000)])
    capacity = IntegerField("Capacity", validators=[InputRequired(), NumberRange(min=1)])


class RoomUpdateForm(ApiForm):
    name = StringField("Name", validators=[Optional(), Length(max=120)])
    description = StringField("Description", validators=[Optional(), Length(max=1000)])
    capacity = IntegerField("Capacity", validators=[Optional(), NumberRange(min=1)])


def _require_room(room_id: str):
    room = rooms_dao.get_room_by_id(parse_id(room_id, "room"))
    if room is None:
        raise NotFoundError("Room not found.")
    return room


@bp.route("", methods=["GET"])
def list_rooms():
    """List rooms with optional name search and pagination."""

    default_limit = current_app.config["DEFAULT_PAGE_SIZE"]
    page = max(int_arg("page", 1), 1)
    limit = int_arg("limit", default_limit)
    if limit < 1:
        limit = default_limit
    rooms = rooms_dao.list_rooms(name=request.args.get("name") or None, page=page, limit=limit)
    return respond([room.to_dict() for room in rooms], "Rooms retrieved.")


@bp.route("/<room_id>", methods=["GET"])
def room_detail(room_id: str):
    """Room details together with its bookings."""

    room = _require_room(room_id)
    bookings = bookings_dao.list_bookings_for_room(room.room_id)
    return respond(
        {"room": room.to_dict(), "bookings": [booking.to_dict() for booking in bookings]},
        "Room retrieved.",
    )


@bp.route("", methods=["POST"])
@admin_required
def create_room():
    form = validated(RoomForm())
    try:
        room = rooms_dao.create_room(
            name=form.name.data.strip(),
            description=form.description.data or "",
            capacity=form.capacity.data,
        )
    except sqlite3.IntegrityError:
        raise ConflictError("A room with that name already exists.")
    current_app.logger.info("Room %s created", room.name)
    return respond(room.to_dict(), "Room created.", 201)


@bp.route("/<room_id>", methods=["PUT"])
@admin_required
def update_room(room_id: str):
    """Partially update a room; empty values leave fields unchanged."""

    room = _require_room(room_id)
    form = validated(RoomUpdateForm())
    fields = {}
    if form.name.data:
        fields["name"] = form.name.data.strip()
    if form.description.data:
        fields["description"] = form.description.data
    if form.capacity.data:
        fields["capacity"] = form.capacity.data
    try:
        rooms_dao.update_room(room.room_id, **fields)
    except sqlite3.IntegrityError:
        raise ConflictError("A room with that name already exists.")
    return respond(rooms_dao.get_room_by_id(room.room_id).to_dict(), "Room updated.")


@bp.route("/<room_id>", methods=["DELETE"])
@admin_required
def delete_room(room_id: str):
    """Delete a room. Its bookings are kept."""

    room = _require_room(room_id)
    rooms_dao.delete_room(room.room_id)
    current_app.logger.info("Room %s deleted", room.name)
    return respond(None, "Room deleted.")
