"""Email dispatch for account notifications."""
from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from greenpact.core.config import Settings
from greenpact.core.errors import NotificationFailure

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NotificationMessage:
    recipient: str
    subject: str
    body: str
    html: str | None = None
    metadata: dict[str, str] | None = None


class NotificationSender(Protocol):
    async def send(self, message: NotificationMessage) -> None:
        ...


class SMTPSender:
    """Deliver messages through an SMTP relay without blocking the event loop."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        from_name: str,
        use_tls: bool = True,
        timeout: int = 15,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPSender":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )

    def build_mime(self, message: NotificationMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = message.recipient
        msg.attach(MIMEText(message.body, "plain"))
        if message.html:
            msg.attach(MIMEText(message.html, "html"))
        return msg

    def _deliver(self, message: NotificationMessage) -> None:
        msg = self.build_mime(message)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.from_email, [message.recipient], msg.as_string())

    async def send(self, message: NotificationMessage) -> None:
        await asyncio.to_thread(self._deliver, message)
        logger.info("Email '%s' sent to %s", message.subject, message.recipient)


class LoggingSender:
    """Stand-in used when no SMTP relay is configured."""

    async def send(self, message: NotificationMessage) -> None:
        logger.warning("SMTP not configured; email to %s was not delivered", message.recipient)
        logger.debug("Undelivered email body:\n%s", message.body)


def sender_from_settings(settings: Settings) -> NotificationSender:
    if settings.smtp_host:
        return SMTPSender.from_settings(settings)
    return LoggingSender()


def build_registration_code_message(
    email: str, code: str, expire_minutes: int, app_name: str
) -> NotificationMessage:
    text = (
        f"Welcome to {app_name}!\n\n"
        f"Your One-Time Password (OTP) for registration is: {code}\n\n"
        f"This OTP is valid for {expire_minutes} minutes. Please do not share it with anyone.\n"
        "If you did not request this, please ignore this email.\n\n"
        f"Best regards,\nThe {app_name} Team"
    )
    html = f"""
<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <h2 style="color: #107C41;">Welcome to {app_name}!</h2>
  <p>Thank you for starting your registration process with {app_name}.</p>
  <p>Your One-Time Password (OTP) for registration is:</p>
  <h3 style="color: #FF8C00; font-size: 24px; padding: 15px; border: 2px dashed #FF8C00; display: inline-block;">
    <strong>{code}</strong>
  </h3>
  <p>This OTP is valid for {expire_minutes} minutes. Please do not share it with anyone.</p>
  <p>If you did not request this, please ignore this email.</p>
  <p>Best regards,<br/>The {app_name} Team</p>
</div>
"""
    return NotificationMessage(
        recipient=email,
        subject=f"{app_name}: Your Registration OTP",
        body=text,
        html=html,
        metadata={"purpose": "registration"},
    )


async def notify(sender: NotificationSender, message: NotificationMessage) -> None:
    try:
        await sender.send(message)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to deliver email to %s: %s", message.recipient, exc)
        raise NotificationFailure() from exc
