"""Console email sender for development"""

from __future__ import annotations

import logging

from .base import EmailMessage, EmailSender

logger = logging.getLogger(__name__)


class ConsoleEmailSender(EmailSender):
    """Development email sender that logs to console."""

    def send(self, message: EmailMessage) -> bool:
        logger.info("[Email][Console] To: %s", message.to)
        logger.info("[Email][Console] Subject: %s", message.subject)
        logger.info("[Email][Console] Body preview: %s...", (message.text_body or message.html_body)[:200])
        if message.inline_images:
            logger.info("[Email][Console] Inline images: %s", ", ".join(img.filename for img in message.inline_images))
        return True
