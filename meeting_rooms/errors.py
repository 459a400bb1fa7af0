"""Typed errors raised by the booking services and rendered by the API."""

from __future__ import annotations

from typing import Any, Optional


class BookingServiceError(Exception):
    """Base error carrying the HTTP status the API should answer with."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(BookingServiceError):
    status_code = 400
    default_message = "Input validation failed."


class NotFoundError(BookingServiceError):
    status_code = 404
    default_message = "Resource not found."


class ConflictError(BookingServiceError):
    status_code = 409
    default_message = "Booking conflicts with an existing reservation."


class CapacityError(BookingServiceError):
    status_code = 422
    default_message = "Attendees exceed the room capacity."


class InvalidTransitionError(BookingServiceError):
    status_code = 409
    default_message = "Booking cannot move to the requested status."


class AlreadyApprovedError(InvalidTransitionError):
    default_message = "Booking is already approved."


class AlreadyRejectedError(InvalidTransitionError):
    default_message = "Booking is already rejected."


class AuthError(BookingServiceError):
    status_code = 401
    default_message = "Could not validate credentials."


class ForbiddenError(BookingServiceError):
    status_code = 403
    default_message = "Admin only."
