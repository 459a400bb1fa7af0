"""Checkout tokens and the QR codes that carry them.

A checkout token is a bearer capability: whoever presents it may delete the
booking it belongs to without logging in. It is printed as a QR code that can
be scanned at the room to release it.
"""

from __future__ import annotations

import base64
import io
import secrets

import qrcode
from qrcode.constants import ERROR_CORRECT_M

TOKEN_BYTES = 32
CHECKOUT_PATH = "/api/bookings/delete/{token}"


def generate_checkout_token() -> str:
    """Mint a fresh URL-safe token with 256 bits of entropy."""

    return secrets.token_urlsafe(TOKEN_BYTES)


def checkout_url(base_url: str, token: str) -> str:
    """Absolute URL of the delete-by-token endpoint for ``token``."""

    return base_url.rstrip("/") + CHECKOUT_PATH.format(token=token)


def render_qr_png(data: str) -> bytes:
    """Encode ``data`` as a PNG QR code."""

    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def checkout_qr_base64(base_url: str, token: str) -> str:
    """Base64 PNG of the QR code pointing at the checkout URL."""

    png = render_qr_png(checkout_url(base_url, token))
    return base64.b64encode(png).decode("ascii")
