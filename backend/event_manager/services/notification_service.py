"""Outbound email.

Messages are built by the ``*_email`` functions as plain values so they can be
handed to a background task after the request's transaction has committed.
``Mailer.send`` never raises: a failed delivery is logged and reported as
False, and the operation that triggered it stands.
"""
import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Iterable, Optional

import pytz

from event_manager.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: Optional[str] = None


class Mailer:
    """SMTP transport configured from settings."""

    def __init__(
        self,
        host: str = "",
        port: int = 587,
        username: str = "",
        password: str = "",
        sender: str = "",
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls

    @classmethod
    def from_settings(cls) -> "Mailer":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender=settings.SMTP_FROM,
            use_tls=settings.SMTP_USE_TLS,
        )

    def send(self, email: OutgoingEmail) -> bool:
        """Deliver one message; any failure, including a malformed header, is
        logged and reported as False."""
        try:
            self._deliver(email)
        except Exception:
            logger.exception("Email sending failed to %s (%s)", email.to, email.subject)
            return False
        logger.info("Email sent to %s (%s)", email.to, email.subject)
        return True

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = email.to
        msg["Subject"] = email.subject
        msg.set_content(email.text)
        if email.html:
            msg.add_alternative(email.html, subtype="html")
        return msg

    def _deliver(self, email: OutgoingEmail) -> None:
        msg = self.build_message(email)
        if not self.host:
            logger.warning("SMTP_HOST not configured; dropping email to %s", email.to)
            return

        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=30) as smtp:
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)


def dispatch_emails(mailer: Mailer, emails: Iterable[OutgoingEmail]) -> int:
    """Send each message independently; returns how many were delivered."""
    delivered = 0
    for email in emails:
        if mailer.send(email):
            delivered += 1
    return delivered


def format_event_date(value: datetime) -> str:
    """Render an event date in the configured display time zone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(pytz.timezone(settings.DISPLAY_TIMEZONE))
    return local.strftime("%A, %d %B %Y at %H:%M %Z")


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------

def verification_email(to: str, name: str, token: str) -> OutgoingEmail:
    link = f"{settings.API_BASE_URL}/api/users/verify-email/{token}"
    hours = settings.EMAIL_VERIFY_EXPIRE_HOURS
    return OutgoingEmail(
        to=to,
        subject="Verify your email address",
        text=(
            f"Hello {name},\n\nPlease confirm your email address by opening the link below:\n\n"
            f"{link}\n\nThe link expires in {hours} hours."
        ),
        html=(
            f"<p>Hello <b>{name}</b>,</p><p>Please confirm your email address.</p>"
            f'<p><a href="{link}">Verify email</a></p><p>The link expires in {hours} hours.</p>'
        ),
    )


def password_reset_email(to: str, name: str, token: str) -> OutgoingEmail:
    link = f"{settings.FRONTEND_URL}/reset-password/{token}"
    minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
    return OutgoingEmail(
        to=to,
        subject="Reset your password",
        text=(
            f"Hello {name},\n\nA password reset was requested for your account. "
            f"Use the link below to choose a new password:\n\n{link}\n\n"
            f"The link expires in {minutes} minutes. If you did not ask for this, ignore this email."
        ),
        html=(
            f"<p>Hello <b>{name}</b>,</p><p>A password reset was requested for your account.</p>"
            f'<p><a href="{link}">Choose a new password</a></p>'
            f"<p>The link expires in {minutes} minutes.</p>"
        ),
    )


def invitation_email(to: str, name: str, title: str, date: datetime, location: str) -> OutgoingEmail:
    when = format_event_date(date)
    link = f"{settings.FRONTEND_URL}/invitations"
    return OutgoingEmail(
        to=to,
        subject=f"You're Invited to {title}",
        text=(
            f"Hello {name},\n\nYou have been invited to the event \"{title}\" happening on "
            f"{when} at {location}.\n\nPlease log in to accept or decline the invitation."
        ),
        html=(
            f"<p>Hello <b>{name}</b>,</p><p>You have been invited to the event \"<b>{title}</b>\" "
            f"happening on <b>{when}</b> at <b>{location}</b>.</p>"
            f'<p><a href="{link}">Click here</a> to accept or decline.</p>'
        ),
    )


def event_approved_email(to: str, name: str, title: str, date: datetime, location: str) -> OutgoingEmail:
    when = format_event_date(date)
    return OutgoingEmail(
        to=to,
        subject=f"{title} has been approved",
        text=(
            f"Hello {name},\n\nThe event \"{title}\" on {when} at {location} "
            f"has been approved and will go ahead."
        ),
        html=(
            f"<p>Hello <b>{name}</b>,</p><p>The event \"<b>{title}</b>\" on <b>{when}</b> "
            f"at <b>{location}</b> has been approved and will go ahead.</p>"
        ),
    )


_mailer: Optional[Mailer] = None


def get_mailer() -> Mailer:
    """FastAPI dependency returning the process-wide mailer."""
    global _mailer
    if _mailer is None:
        _mailer = Mailer.from_settings()
    return _mailer
