"""Verification email composition and delivery."""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol

from tabletop_prep.core.config import MailingSettings
from tabletop_prep.core.exceptions import EmailDeliveryError
from tabletop_prep.core.logging import get_logger


logger = get_logger(__name__)


class Mailer(Protocol):
    """Anything that can deliver an EmailMessage."""

    def send(self, message: EmailMessage) -> None: ...


def verification_url(settings: MailingSettings, token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/verify/{token}"


def build_verification_email(settings: MailingSettings, email: str, token: str) -> EmailMessage:
    """Compose the subscription confirmation message.

    Args:
        settings: Sender and link configuration.
        email: Recipient address.
        token: Verification token embedded in the link.

    Returns:
        A multipart message with plain text and HTML bodies.
    """
    url = verification_url(settings, token)

    message = EmailMessage()
    message["From"] = formataddr((settings.from_name, settings.from_email))
    message["To"] = email
    message["Subject"] = "Verify your subscription"
    message.set_content(
        f"Thank you for subscribing to {settings.from_name}! "
        f"Please verify your email by clicking: {url}"
    )
    message.add_alternative(
        f"""\
<h1>Welcome to {settings.from_name}!</h1>
<p>Thank you for subscribing to our mailing list.</p>
<p>Please verify your email address by clicking the link below:</p>
<p><a href="{url}" style="background-color: #c06262; color: white; padding: 10px 20px;
   text-decoration: none; border-radius: 5px; display: inline-block;">Verify Email Address</a></p>
<p>If the button doesn't work, copy and paste this URL into your browser:</p>
<p>{url}</p>
""",
        subtype="html",
    )
    return message


class SmtpMailer:
    """Deliver messages through an SMTP server."""

    def __init__(self, settings: MailingSettings, *, timeout: float = 30.0) -> None:
        self._settings = settings
        self._timeout = timeout

    def send(self, message: EmailMessage) -> None:
        """Send one message.

        Raises:
            EmailDeliveryError: If the server cannot be reached or refuses.
        """
        settings = self._settings
        smtp_class = smtplib.SMTP_SSL if settings.smtp_use_tls else smtplib.SMTP
        try:
            with smtp_class(settings.smtp_host, settings.smtp_port, timeout=self._timeout) as server:
                if not settings.smtp_use_tls:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                        server.ehlo()
                if settings.smtp_user and settings.smtp_password:
                    server.login(settings.smtp_user, settings.smtp_password.get_secret_value())
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(
                "Failed to send email",
                details={"to": message["To"], "error": str(exc)},
            ) from exc
        logger.info("Email sent", to=message["To"], subject=message["Subject"])


class OutboxMailer:
    """Keep messages in memory instead of sending them (development and tests)."""

    def __init__(self) -> None:
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.outbox.append(message)
        logger.debug("Email queued in outbox", to=message["To"])


__all__ = [
    "Mailer",
    "OutboxMailer",
    "SmtpMailer",
    "build_verification_email",
    "verification_url",
]
