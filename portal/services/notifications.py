# portal/services/notifications.py
"""
Invitation and welcome emails.

Sending is best-effort: a failed send is logged and reported as ``False``,
never raised into the invitation flow. Without SMTP configuration the
notifier only logs what it would have sent (development mode).
"""
from __future__ import annotations

import html
import logging
import smtplib
from abc import ABC, abstractmethod
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Callable, Dict, List, Optional

from portal.core import config

logger = logging.getLogger("portal.notifications")

DEFAULT_COLORS = {
    "primary": "#667eea",
    "secondary": "#764ba2",
    "accent": "#ffffff",
}


class NotificationDispatcher(ABC):
    """Interface used by the invitation routes."""

    @abstractmethod
    def send_invitation(
        self,
        *,
        to: str,
        invite_link: str,
        expires_at: datetime,
        invitee_name: Optional[str] = None,
        inviter_name: Optional[str] = None,
        organization_name: Optional[str] = None,
        message: Optional[str] = None,
        brand_colors: Optional[Dict[str, Any]] = None,
        logo_url: Optional[str] = None,
    ) -> bool:
        """Send the invitation link; True when the message was handed off."""

    @abstractmethod
    def send_welcome(self, *, to: str, login_url: str, name: Optional[str] = None) -> bool:
        """Send the post-acceptance welcome email."""


def _gradient(colors: Optional[Dict[str, Any]]) -> str:
    colors = colors or {}
    primary = colors.get("primary") or DEFAULT_COLORS["primary"]
    secondary = colors.get("secondary") or DEFAULT_COLORS["secondary"]
    return f"linear-gradient(135deg, {primary} 0%, {secondary} 100%)"


def render_invitation_html(
    *,
    invite_link: str,
    expires_at: datetime,
    invitee_name: Optional[str],
    inviter_name: Optional[str],
    organization_name: Optional[str],
    message: Optional[str],
    brand_colors: Optional[Dict[str, Any]],
    logo_url: Optional[str],
) -> str:
    greeting = f"Hi {html.escape(invitee_name)}," if invitee_name else "Hi there,"
    who = html.escape(inviter_name) if inviter_name else "Our team"
    where = f" for {html.escape(organization_name)}" if organization_name else ""
    note = (
        f'<p style="border-left:3px solid #ccc;padding-left:12px;">{html.escape(message)}</p>'
        if message
        else ""
    )
    logo = f'<img src="{html.escape(logo_url)}" alt="" height="48">' if logo_url else ""
    return f"""
<div style="font-family:Arial,sans-serif;max-width:560px;margin:0 auto;">
  <div style="background:{_gradient(brand_colors)};padding:24px;color:#fff;">
    {logo}<h1 style="margin:8px 0 0;">{html.escape(config.APP_NAME)}</h1>
  </div>
  <div style="padding:24px;">
    <p>{greeting}</p>
    <p>{who} invited you to the client portal{where}.</p>
    {note}
    <p><a href="{html.escape(invite_link)}">Accept your invitation</a></p>
    <p style="color:#888;font-size:12px;">This link expires on {expires_at:%B %d, %Y}.</p>
  </div>
</div>
""".strip()


def render_welcome_html(*, login_url: str, name: Optional[str]) -> str:
    greeting = f"Welcome, {html.escape(name)}!" if name else "Welcome!"
    return f"""
<div style="font-family:Arial,sans-serif;max-width:560px;margin:0 auto;">
  <div style="background:{_gradient(None)};padding:24px;color:#fff;">
    <h1 style="margin:0;">{greeting}</h1>
  </div>
  <div style="padding:24px;">
    <p>Your {html.escape(config.APP_NAME)} account is ready.</p>
    <p><a href="{html.escape(login_url)}">Sign in</a></p>
  </div>
</div>
""".strip()


class EmailNotifier(NotificationDispatcher):
    def __init__(
        self,
        *,
        host: str = "",
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender

    @classmethod
    def from_config(cls) -> "EmailNotifier":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
            sender=config.EMAIL_FROM,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host)

    def _send(self, to: str, subject: str, body_html: str) -> bool:
        if not self.configured:
            logger.info("[dev mode] would send email %r to %s", subject, to)
            return True

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = self.sender
            msg["To"] = to
            msg.attach(MIMEText(body_html, "html"))

            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("failed to send email %r to %s: %s", subject, to, exc)
            return False

        logger.info("email sent: %r to %s", subject, to)
        return True

    def send_invitation(
        self,
        *,
        to: str,
        invite_link: str,
        expires_at: datetime,
        invitee_name: Optional[str] = None,
        inviter_name: Optional[str] = None,
        organization_name: Optional[str] = None,
        message: Optional[str] = None,
        brand_colors: Optional[Dict[str, Any]] = None,
        logo_url: Optional[str] = None,
    ) -> bool:
        subject = (
            f"You're invited to join {organization_name} on {config.APP_NAME}"
            if organization_name
            else f"You're invited to {config.APP_NAME}"
        )
        body = render_invitation_html(
            invite_link=invite_link,
            expires_at=expires_at,
            invitee_name=invitee_name,
            inviter_name=inviter_name,
            organization_name=organization_name,
            message=message,
            brand_colors=brand_colors,
            logo_url=logo_url,
        )
        return self._send(to, subject, body)

    def send_welcome(self, *, to: str, login_url: str, name: Optional[str] = None) -> bool:
        body = render_welcome_html(login_url=login_url, name=name)
        return self._send(to, f"Welcome to {config.APP_NAME}", body)


class RecordingNotifier(NotificationDispatcher):
    """Keeps sent messages in memory. Used by scripts and tests."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[Dict[str, Any]] = []

    def send_invitation(self, **kwargs) -> bool:
        self.sent.append({"kind": "invitation", **kwargs})
        return self.succeed

    def send_welcome(self, **kwargs) -> bool:
        self.sent.append({"kind": "welcome", **kwargs})
        return self.succeed


def notify_safely(send: Callable[..., bool], **kwargs) -> bool:
    """Call a dispatcher method; any failure becomes False."""
    try:
        return bool(send(**kwargs))
    except Exception:
        logger.exception("notification dispatcher failed (to=%s)", kwargs.get("to"))
        return False


_notifier: Optional[NotificationDispatcher] = None


def get_notifier() -> NotificationDispatcher:
    """FastAPI dependency; tests override it."""
    global _notifier
    if _notifier is None:
        _notifier = EmailNotifier.from_config()
    return _notifier
