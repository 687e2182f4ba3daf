"""Outbound email: activation messages over SMTP."""

import logging
import smtplib
import socket
import threading
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import get_settings
from app.exceptions import EmailDeliveryError

logger = logging.getLogger("kkal_tracker.email")

APP_NAME = "Kkal Tracker"
DEFAULT_LANGUAGE = "en_US"
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

ACTIVATION_SUBJECTS = {
    "en_US": f"Account Activation - {APP_NAME}",
    "uk_UA": f"Активація облікового запису - {APP_NAME}",
    "ru_UA": f"Активация учетной записи - {APP_NAME}",
}


class EmailService:
    """Renders and sends transactional email."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        from_address: str = "noreply@kkal-tracker.com",
        app_url: str = "http://localhost:8080",
        timeout: float = 10.0,
        send_deadline: float = 30.0,
        activation_ttl_hours: int = 24,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.app_url = app_url.rstrip("/")
        self.timeout = timeout
        self.send_deadline = send_deadline
        self.activation_ttl_hours = activation_ttl_hours
        self.templates = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html"]),
        )

    def activation_url(self, token: str) -> str:
        return f"{self.app_url}/activate/{token}"

    def render_activation_email(self, to_email: str, token: str, language: str) -> tuple[str, str]:
        """Return (subject, html_body) for the given language, English when unsupported."""
        if language not in ACTIVATION_SUBJECTS:
            language = DEFAULT_LANGUAGE
        template = self.templates.get_template(f"activation_{language}.html")
        body = template.render(
            app_name=APP_NAME,
            email=to_email,
            activation_url=self.activation_url(token),
            ttl_hours=self.activation_ttl_hours,
        )
        return ACTIVATION_SUBJECTS[language], body

    def send_activation_email(self, to_email: str, token: str, language: str) -> None:
        """Send the activation link. Raises EmailDeliveryError on any delivery failure or timeout."""
        subject, html = self.render_activation_email(to_email, token, language)

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to_email
        msg["Date"] = formatdate(localtime=False)
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            self._send(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send activation email to %s: %s", to_email, type(e).__name__)
            raise EmailDeliveryError() from e

        logger.info("Activation email sent to %s", to_email)

    def _send(self, msg: MIMEMultipart) -> None:
        """Deliver one message.

        ``timeout`` bounds each socket operation. ``send_deadline`` bounds the
        whole conversation after connect: when it passes, the socket is shut
        down, the blocked call fails and the error surfaces as a delivery failure.
        """
        smtp_class = smtplib.SMTP_SSL if self.port == 465 else smtplib.SMTP
        server = smtp_class(self.host, self.port, timeout=self.timeout)
        expired = threading.Event()
        watchdog = threading.Timer(self.send_deadline, _abort_connection, args=(server, expired))
        watchdog.daemon = True
        watchdog.start()
        try:
            with server:
                if self.port != 465:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            if expired.is_set():
                raise TimeoutError(f"SMTP send exceeded {self.send_deadline}s") from None
            raise
        finally:
            watchdog.cancel()


def _abort_connection(server: smtplib.SMTP, expired: threading.Event) -> None:
    expired.set()
    sock = server.sock
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already closed by the other side.
        pass


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton email service instance."""
    global _email_service
    if _email_service is None:
        settings = get_settings()
        _email_service = EmailService(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_address=settings.SMTP_FROM,
            app_url=settings.APP_URL,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
            send_deadline=settings.SMTP_SEND_DEADLINE_SECONDS,
            activation_ttl_hours=settings.ACTIVATION_TOKEN_TTL_HOURS,
        )
    return _email_service
