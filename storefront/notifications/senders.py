"""Email senders. One process-wide sender, swappable for tests."""
import asyncio
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Dict, Optional
from uuid import uuid4

from storefront.config.settings import config_settings
from storefront.notifications.constants import EMAIL_BACKEND, logger


class EmailSender(ABC):

    @abstractmethod
    async def send(self, to: str, subject: str, body: str, html_body: Optional[str] = None) -> Dict:
        """Returns {"message_id", "status": "sent"|"failed", "error"?}. May raise on transport errors."""
        ...


class LogEmailSender(EmailSender):
    """Default for dev: writes the message to the log instead of delivering it."""

    async def send(self, to: str, subject: str, body: str, html_body: Optional[str] = None) -> Dict:
        message_id = f"email-{uuid4().hex[:12]}"
        logger.info("email.logged", extra={"to_domain": to.partition("@")[2], "subject": subject, "message_id": message_id})
        return {"message_id": message_id, "status": "sent"}


class SmtpEmailSender(EmailSender):

    def __init__(self, host: str, port: int = 587, user: Optional[str] = None, password: Optional[str] = None,
                 sender: str = "noreply@ecommerce.com", timeout: float = 10.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def _build(self, to: str, subject: str, body: str, html_body: Optional[str]) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password or "")
            smtp.send_message(msg)

    async def send(self, to: str, subject: str, body: str, html_body: Optional[str] = None) -> Dict:
        msg = self._build(to, subject, body, html_body)
        # smtplib blocks , keep it off the event loop
        await asyncio.to_thread(self._send_blocking, msg)
        message_id = f"email-{uuid4().hex[:12]}"
        logger.info("email.sent", extra={"subject": subject, "message_id": message_id})
        return {"message_id": message_id, "status": "sent"}


def build_sender_from_settings() -> EmailSender:
    if EMAIL_BACKEND == "smtp" and config_settings.SMTP_HOST:
        return SmtpEmailSender(
            host=config_settings.SMTP_HOST,
            port=int(config_settings.SMTP_PORT),
            user=config_settings.SMTP_USER,
            password=config_settings.SMTP_PASSWORD,
            sender=config_settings.SMTP_FROM,
            timeout=float(config_settings.SMTP_TIMEOUT_SECONDS),
        )
    if EMAIL_BACKEND == "smtp":
        logger.warning("email.smtp.not_configured", extra={"fallback": "log"})
    return LogEmailSender()


_sender: Optional[EmailSender] = None


def get_email_sender() -> EmailSender:
    global _sender
    if _sender is None:
        _sender = build_sender_from_settings()
    return _sender


def set_email_sender(sender: Optional[EmailSender]) -> None:
    """Install a sender (None resets to the configured default on next use)."""
    global _sender
    _sender = sender
