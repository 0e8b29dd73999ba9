"""Tests for outbound email delivery."""

import logging
import smtplib
from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from authcore.config import get_settings
from authcore.errors import DeliveryError
from authcore.services.email_service import EmailService


def _service(**overrides) -> EmailService:
    return EmailService(replace(get_settings(), **overrides))


class TestEmailService:
    """Tests for EmailService.send."""

    def test_console_delivery_without_smtp_host(self, caplog):
        """With no SMTP host the message goes to the log."""
        service = _service(SMTP_HOST="")
        with caplog.at_level(logging.INFO, logger="authcore"):
            service.send("user@example.com", "Password reset token", "link: http://x/reset/abc")
        assert "user@example.com" in caplog.text
        assert "http://x/reset/abc" in caplog.text

    @patch("authcore.services.email_service.smtplib.SMTP")
    def test_smtp_delivery(self, mock_smtp):
        """Messages are sent over SMTP with STARTTLS and login."""
        server = MagicMock()
        mock_smtp.return_value.__enter__.return_value = server

        service = _service(SMTP_HOST="smtp.example.com", SMTP_USERNAME="mailer", SMTP_PASSWORD="secret")
        service.send("user@example.com", "Password reset token", "body")

        mock_smtp.assert_called_once_with("smtp.example.com", service.port, timeout=10)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "user@example.com"
        assert sent["Subject"] == "Password reset token"

    @patch("authcore.services.email_service.smtplib.SMTP")
    def test_smtp_failure_raises_delivery_error(self, mock_smtp):
        """Transport errors surface as DeliveryError."""
        mock_smtp.side_effect = smtplib.SMTPConnectError(421, b"unavailable")

        service = _service(SMTP_HOST="smtp.example.com")
        with pytest.raises(DeliveryError):
            service.send("user@example.com", "Password reset token", "body")

    @patch("authcore.services.email_service.smtplib.SMTP")
    def test_connection_refused_raises_delivery_error(self, mock_smtp):
        """Socket errors surface as DeliveryError too."""
        mock_smtp.side_effect = ConnectionRefusedError()

        with pytest.raises(DeliveryError):
            _service(SMTP_HOST="smtp.example.com").send("user@example.com", "s", "b")
