"""Outbound email delivery."""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Protocol

from src.config.logging_config import redact_email

from .exceptions import DeliveryFailedException

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    """Send a plain-text message to one recipient."""

    async def send(self, to_address: str, subject: str, body: str) -> None: ...


class SMTPEmailSender:
    """SMTP delivery with STARTTLS or implicit TLS.

    When no host is configured the message is logged instead of sent, which
    keeps local development usable without a mail server.
    """

    def __init__(
        self,
        *,
        host: str | None = None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        from_email: str | None = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.from_email)

    async def send(self, to_address: str, subject: str, body: str) -> None:
        """Deliver a message.

        Raises:
            DeliveryFailedException: If the SMTP server rejects or cannot be reached

        """
        if not self.is_configured:
            logger.info(f"SMTP not configured, email to {redact_email(to_address)} not sent: {subject}")
            return

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.from_email
        message["To"] = to_address
        message.set_content(body)

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, ssl.SSLError, OSError) as err:
            logger.error(f"Failed to send email to {redact_email(to_address)}: {type(err).__name__}: {err}")
            raise DeliveryFailedException("Failed to send email") from err

        logger.info(f"Email sent to {redact_email(to_address)}: {subject}")

    def _deliver(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                self._login(server)
                server.send_message(message)
        else:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                self._login(server)
                server.send_message(message)

    def _login(self, server: smtplib.SMTP) -> None:
        if self.username and self.password:
            server.login(self.username, self.password)
