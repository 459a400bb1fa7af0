"""Email sender factory - returns appropriate sender based on config."""

from __future__ import annotations

import logging
from typing import Mapping

from .base import EmailSender
from .console import ConsoleEmailSender
from .sendgrid import SendGridEmailSender

logger = logging.getLogger(__name__)


def get_email_sender(config: Mapping) -> EmailSender:
    """Build the sender selected by ``EMAIL_PROVIDER``."""

    provider = str(config.get("EMAIL_PROVIDER", "console")).lower()
    if provider == "sendgrid":
        if config.get("SENDGRID_API_KEY"):
            return SendGridEmailSender(
                api_key=config["SENDGRID_API_KEY"],
                from_email=config["FROM_EMAIL"],
                from_name=config.get("FROM_NAME", ""),
            )
        logger.warning("SENDGRID_API_KEY not set, email notifications will only be logged")
    return ConsoleEmailSender()
