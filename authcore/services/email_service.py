"""Outbound email for password reset links."""

import logging
import smtplib
from email.message import EmailMessage

from authcore.config import Settings, get_settings
from authcore.errors import DeliveryError

logger = logging.getLogger("authcore")


class EmailService:
    """Sends plain-text email over SMTP.

    With no ``SMTP_HOST`` configured the message is written to the log instead,
    which is how reset links reach a developer running locally.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.sender = settings.EMAIL_FROM

    def send(self, recipient: str, subject: str, body: str) -> None:
        """Deliver one message. Raises DeliveryError on any transport failure."""
        if not self.host:
            logger.info("EMAIL to=%s subject=%r\n%s", recipient, subject, body)
            return

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Email delivery to %s failed: %s", recipient, e)
            raise DeliveryError(str(e)) from e

        logger.info("Email sent to %s", recipient)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService(get_settings())
    return _email_service
