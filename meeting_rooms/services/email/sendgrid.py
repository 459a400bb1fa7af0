"""SendGrid email sender for production"""

from __future__ import annotations

import base64
import logging

import httpx

from .base import EmailMessage, EmailSender

logger = logging.getLogger(__name__)


class SendGridEmailSender(EmailSender):
    """Production email sender using the SendGrid v3 API."""

    SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"

    def __init__(self, api_key: str, from_email: str, from_name: str = "", timeout: float = 30.0):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout

    def _payload(self, message: EmailMessage) -> dict:
        sender = {"email": self.from_email}
        if self.from_name:
            sender["name"] = self.from_name

        payload = {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": sender,
            "subject": message.subject,
            "content": [{"type": "text/html", "value": message.html_body}],
        }
        if message.text_body:
            payload["content"].insert(0, {"type": "text/plain", "value": message.text_body})
        if message.inline_images:
            payload["attachments"] = [
                {
                    "content": base64.b64encode(image.data).decode("ascii"),
                    "type": "image/png",
                    "filename": image.filename,
                    "disposition": "inline",
                    "content_id": image.content_id,
                }
                for image in message.inline_images
            ]
        return payload

    def send(self, message: EmailMessage) -> bool:
        if not self.api_key:
            logger.error("[Email][SendGrid] No API key configured")
            return False

        response = httpx.post(
            self.SENDGRID_API_URL,
            json=self._payload(message),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        if response.status_code in (200, 201, 202):
            logger.info("[Email][SendGrid] Sent to %s***", message.to[:3])
            return True

        logger.error("[Email][SendGrid] Failed: %s - %s", response.status_code, response.text)
        return False
