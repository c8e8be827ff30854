import smtplib
from datetime import datetime

from portal.services.notifications import (
    EmailNotifier,
    notify_safely,
    render_invitation_html,
)


def test_invitation_html_escapes_user_content():
    html = render_invitation_html(
        invite_link="https://portal.test/accept-invite?token=abc",
        expires_at=datetime(2024, 3, 8),
        invitee_name="<script>",
        inviter_name="Ann",
        organization_name="Bob's Gym",
        message="<b>hi</b>",
        brand_colors={"primary": "#ff0000"},
        logo_url=None,
    )

    assert "<script>" not in html
    assert "&lt;b&gt;hi&lt;/b&gt;" in html
    assert "#ff0000" in html
    assert "token=abc" in html


def test_unconfigured_notifier_only_logs():
    notifier = EmailNotifier(host="", sender="portal@test")

    assert notifier.send_welcome(to="bob@bobsgym.test", login_url="http://x/login") is True


def test_smtp_failure_is_reported_as_false(monkeypatch):
    class BrokenSMTP:
        def __init__(self, *args, **kwargs):
            raise smtplib.SMTPConnectError(421, "unavailable")

    monkeypatch.setattr(smtplib, "SMTP", BrokenSMTP)
    notifier = EmailNotifier(host="smtp.test", sender="portal@test")

    assert notifier.send_welcome(to="bob@bobsgym.test", login_url="http://x/login") is False


def test_notify_safely_swallows_dispatcher_errors():
    def explode(**kwargs):
        raise RuntimeError("boom")

    assert notify_safely(explode, to="bob@bobsgym.test") is False
