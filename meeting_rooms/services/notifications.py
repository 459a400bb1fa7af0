"""Fire-and-forget email notifications for booking events.

Messages are rendered in the caller's thread (templates need the app
context) and handed to the dispatcher after the triggering write has been
committed. Delivery failures are logged and never reach the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List, Optional

from flask import current_app, render_template

from ..models.entities import STATUS_APPROVED, Booking, Room
from .checkout import checkout_url, render_qr_png
from .email.base import EmailMessage, EmailSender, InlineImage

logger = logging.getLogger(__name__)

CHECKOUT_QR_CID = "checkout-qr"
DATE_FORMAT = "%A, %d %B %Y at %H:%M"
TIME_FORMAT = "%H:%M"


class NotificationDispatcher:
    """Hands rendered messages to an email sender, optionally on a thread pool."""

    def __init__(self, sender: EmailSender, run_async: bool = True, max_workers: int = 2):
        self.sender = sender
        self.run_async = run_async
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify") if run_async else None
        )

    def dispatch(self, message: EmailMessage) -> Optional[Future]:
        if self._executor is None:
            self._deliver(message)
            return None
        return self._executor.submit(self._deliver, message)

    def dispatch_all(self, messages: Iterable[EmailMessage]) -> None:
        for message in messages:
            self.dispatch(message)

    def _deliver(self, message: EmailMessage) -> bool:
        try:
            delivered = self.sender.send(message)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Email delivery to %s failed", message.to)
            return False
        if not delivered:
            logger.warning("Email to %s was not accepted for delivery", message.to)
        return delivered

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)


def get_dispatcher() -> NotificationDispatcher:
    return current_app.extensions["notifications"]


def _context(booking: Booking, room: Room) -> dict:
    return {
        "booking": booking,
        "room": room,
        "starts": booking.start_datetime.strftime(DATE_FORMAT),
        "ends": booking.end_datetime.strftime(TIME_FORMAT),
    }


def booking_created_messages(booking: Booking, room: Room) -> List[EmailMessage]:
    """Confirmation to the requester plus one request notice per admin address."""

    context = _context(booking, room)
    messages = [
        EmailMessage(
            to=booking.user_email,
            subject="New Meeting Room Booking Confirmation",
            html_body=render_template("email/booking_created.html", **context),
            text_body=render_template("email/booking_created.txt", **context),
        )
    ]
    for admin_email in current_app.config.get("ADMIN_EMAILS", []):
        messages.append(
            EmailMessage(
                to=admin_email,
                subject=f"New Booking Request - {room.name}",
                html_body=render_template("email/booking_admin.html", **context),
                text_body=render_template("email/booking_admin.txt", **context),
            )
        )
    return messages


def status_update_message(booking: Booking, room: Room, old_status: str) -> EmailMessage:
    """Tell the requester about a moderation decision.

    Approvals carry the checkout QR as an inline image.
    """

    inline_images: List[InlineImage] = []
    if booking.status == STATUS_APPROVED:
        url = checkout_url(current_app.config["PUBLIC_BASE_URL"], booking.checkout_token)
        inline_images.append(InlineImage(CHECKOUT_QR_CID, "checkout-qr.png", render_qr_png(url)))

    context = _context(booking, room)
    context.update(
        old_status=old_status,
        new_status=booking.status,
        qr_cid=CHECKOUT_QR_CID if inline_images else None,
    )
    return EmailMessage(
        to=booking.user_email,
        subject=f"Booking Status Update - {booking.status.title()}",
        html_body=render_template("email/status_update.html", **context),
        text_body=render_template("email/status_update.txt", **context),
        inline_images=inline_images,
    )


def password_otp_message(email: str, otp: str, ttl_minutes: int) -> EmailMessage:
    context = {"otp": otp, "ttl_minutes": ttl_minutes}
    return EmailMessage(
        to=email,
        subject="Password Reset Code",
        html_body=render_template("email/password_otp.html", **context),
        text_body=render_template("email/password_otp.txt", **context),
    )
