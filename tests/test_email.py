"""Tests for activation email rendering and SMTP delivery."""

import smtplib
import socket
import threading
from unittest.mock import patch

import pytest

from app.exceptions import EmailDeliveryError
from app.services.email import EmailService

TOKEN = "a" * 64


@pytest.fixture(name="email_service")
def email_service_fixture() -> EmailService:
    return EmailService(
        host="smtp.test",
        port=587,
        username="mailer",
        password="secret",
        from_address="noreply@test",
        app_url="https://kkal.test/",
        timeout=3,
        activation_ttl_hours=24,
    )


class TestRendering:
    def test_activation_url(self, email_service: EmailService):
        assert email_service.activation_url(TOKEN) == f"https://kkal.test/activate/{TOKEN}"

    @pytest.mark.parametrize(
        "language, subject_start",
        [
            ("en_US", "Account Activation"),
            ("uk_UA", "Активація облікового запису"),
            ("ru_UA", "Активация учетной записи"),
        ],
    )
    def test_localised_subject_and_link(self, email_service: EmailService, language: str, subject_start: str):
        subject, html = email_service.render_activation_email("a@example.com", TOKEN, language)
        assert subject.startswith(subject_start)
        assert f"https://kkal.test/activate/{TOKEN}" in html

    def test_unknown_language_falls_back_to_english(self, email_service: EmailService):
        subject, _ = email_service.render_activation_email("a@example.com", TOKEN, "de_DE")
        assert subject.startswith("Account Activation")

    def test_recipient_is_escaped(self, email_service: EmailService):
        _, html = email_service.render_activation_email("<b>x</b>@example.com", TOKEN, "en_US")
        assert "<b>x</b>" not in html


class TestDelivery:
    def test_sends_over_starttls_with_timeout(self, email_service: EmailService):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            email_service.send_activation_email("a@example.com", TOKEN, "en_US")

        mock_smtp.assert_called_once_with("smtp.test", 587, timeout=3)
        server = mock_smtp.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        msg = server.send_message.call_args.args[0]
        assert msg["To"] == "a@example.com"
        assert msg["From"] == "noreply@test"

    def test_implicit_tls_port(self):
        service = EmailService(host="smtp.test", port=465, timeout=5)
        with patch("app.services.email.smtplib.SMTP_SSL") as mock_ssl:
            service.send_activation_email("a@example.com", TOKEN, "en_US")

        mock_ssl.assert_called_once_with("smtp.test", 465, timeout=5)
        server = mock_ssl.return_value
        server.starttls.assert_not_called()
        server.login.assert_not_called()

    def test_smtp_error_becomes_delivery_error(self, email_service: EmailService):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value
            server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
            with pytest.raises(EmailDeliveryError):
                email_service.send_activation_email("a@example.com", TOKEN, "en_US")

    def test_timeout_becomes_delivery_error(self, email_service: EmailService):
        with patch("app.services.email.smtplib.SMTP", side_effect=TimeoutError("timed out")):
            with pytest.raises(EmailDeliveryError):
                email_service.send_activation_email("a@example.com", TOKEN, "en_US")

    def test_connection_refused_becomes_delivery_error(self, email_service: EmailService):
        with patch("app.services.email.smtplib.SMTP", side_effect=ConnectionRefusedError()):
            with pytest.raises(EmailDeliveryError):
                email_service.send_activation_email("a@example.com", TOKEN, "en_US")

    def test_token_not_logged_on_failure(self, email_service: EmailService, caplog):
        with patch("app.services.email.smtplib.SMTP", side_effect=OSError("boom")):
            with pytest.raises(EmailDeliveryError):
                email_service.send_activation_email("a@example.com", TOKEN, "en_US")
        assert TOKEN not in caplog.text

    def test_send_deadline_aborts_slow_server(self):
        """A server that never finishes replying is cut off once the deadline passes."""
        service = EmailService(host="smtp.test", port=587, timeout=5, send_deadline=0.05)
        released = threading.Event()

        def stalled_send(msg):
            released.wait(5)
            raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")

        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value
            server.sock.shutdown.side_effect = lambda how: released.set()
            server.send_message.side_effect = stalled_send
            with pytest.raises(EmailDeliveryError) as exc_info:
                service.send_activation_email("a@example.com", TOKEN, "en_US")

        server.sock.shutdown.assert_called_once_with(socket.SHUT_RDWR)
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    def test_fast_send_cancels_watchdog(self, email_service: EmailService):
        with patch("app.services.email.smtplib.SMTP") as mock_smtp:
            email_service.send_activation_email("a@example.com", TOKEN, "en_US")
        mock_smtp.return_value.sock.shutdown.assert_not_called()
