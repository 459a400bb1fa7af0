"""Base email sender interface"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class InlineImage:
    """PNG referenced from the HTML body as ``cid:<content_id>``."""

    content_id: str
    filename: str
    data: bytes


@dataclass
class EmailMessage:
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None
    inline_images: List[InlineImage] = field(default_factory=list)


class EmailSender(ABC):
    """Abstract base class for email senders"""

    @abstractmethod
    def send(self, message: EmailMessage) -> bool:
        """
        Send an email.

        Args:
            message: Fully rendered message

        Returns:
            True if the email was accepted for delivery, False otherwise
        """
