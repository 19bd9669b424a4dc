import smtplib
from unittest.mock import MagicMock, patch

from urbanstay.core.config import get_settings
from urbanstay.services import mailer


def test_skipped_without_smtp_host(monkeypatch):
    monkeypatch.setattr(get_settings(), "SMTP_HOST", "")
    with patch("urbanstay.services.mailer.smtplib.SMTP") as smtp:
        assert mailer.send_welcome_email("a@example.com", "Asha", "user") is False
    smtp.assert_not_called()


def test_sends_through_smtp(monkeypatch):
    monkeypatch.setattr(get_settings(), "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(get_settings(), "SMTP_USER", "mailer")
    with patch("urbanstay.services.mailer.smtplib.SMTP") as smtp:
        conn = MagicMock()
        smtp.return_value.__enter__.return_value = conn
        sent = mailer.send_booking_request_email(
            "seller@example.com", "Sunny flat", "Asha", "visit", "2025-06-01", "10:00-11:00"
        )

    assert sent is True
    conn.login.assert_called_once()
    msg = conn.send_message.call_args.args[0]
    assert msg["To"] == "seller@example.com"
    assert msg["Subject"] == "New booking request for Sunny flat"


def test_smtp_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(get_settings(), "SMTP_HOST", "smtp.example.com")
    with patch("urbanstay.services.mailer.smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "busy")):
        assert mailer.send_inquiry_email(
            "owner@example.com", "Sunny flat", "general", "Ben", "ben@example.com", None, "Hi"
        ) is False
