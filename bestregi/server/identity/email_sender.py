"""
Outgoing email.

No mail transport is configured for this application; ``LoggingEmailSender``
writes the message to the log so confirmation links can be picked up during
development. The RegisterConfirmation page shows the link directly while
this sender is in use.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)


@runtime_checkable
class EmailSender(Protocol):
    """Deliver an HTML email."""

    delivers_mail: bool

    async def send_email(self, email: str, subject: str, html_message: str) -> None:
        ...


class LoggingEmailSender:
    """Email sender that only logs."""

    delivers_mail = False

    async def send_email(self, email: str, subject: str, html_message: str) -> None:
        logger.info(f"Email to {email}: {subject}\n{html_message}")
