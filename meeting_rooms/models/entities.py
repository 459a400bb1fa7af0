"""Dataclass-style entity representations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from flask_login import UserMixin

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
BOOKING_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
# Statuses that hold a room and therefore block overlapping requests.
BLOCKING_STATUSES = (STATUS_PENDING, STATUS_APPROVED)

ROLE_ADMIN = "admin"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class User(UserMixin):
    """Administrator account compatible with Flask-Login."""

    user_id: str
    username: str
    email: str
    password_hash: str
    role: str
    created_at: datetime
    reset_otp: Optional[str] = None
    reset_otp_expiry: Optional[datetime] = None

    def get_id(self) -> str:
        return self.user_id

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
        }


@dataclass
class Room:
    """Bookable meeting room."""

    room_id: str
    name: str
    description: str
    capacity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.room_id,
            "name": self.name,
            "description": self.description,
            "capacity": self.capacity,
        }


@dataclass
class Booking:
    """Time-bounded reservation of a room."""

    booking_id: str
    room_id: str
    user_name: str
    user_email: str
    purpose: str
    attendees: int
    start_datetime: datetime
    end_datetime: datetime
    status: str
    checkout_token: str
    created_at: datetime
    room_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.booking_id,
            "room_id": self.room_id,
            "room_name": self.room_name,
            "user_name": self.user_name,
            "user_email": self.user_email,
            "purpose": self.purpose,
            "attendees": self.attendees,
            "start_time": _iso(self.start_datetime),
            "end_time": _iso(self.end_datetime),
            "status": self.status,
            "qr_code_token": self.checkout_token,
            "created_at": _iso(self.created_at),
        }


@dataclass
class BookingView:
    """A booking plus the overtime fields derived at read time."""

    booking: Booking
    is_overtime: bool = False
    overtime_minutes: int = 0
    extended_until: Optional[datetime] = None
    qr_code_base64: Optional[str] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        payload = self.booking.to_dict()
        payload.update(
            {
                "is_overtime": self.is_overtime,
                "overtime_minutes": self.overtime_minutes,
                "extended_until": _iso(self.extended_until),
                "qr_code_base64": self.qr_code_base64,
            }
        )
        return payload


@dataclass(frozen=True)
class TokenClaims:
    """Decoded bearer credential."""

    user_id: str
    role: str
    expires_at: datetime
