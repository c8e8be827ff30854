from datetime import datetime, timedelta

from portal.services.tokens import INVITATION_EXPIRY_DAYS, issue_token


def test_tokens_are_url_safe_and_unique():
    tokens = {issue_token().token for _ in range(200)}

    assert len(tokens) == 200
    for token in tokens:
        # 32 random bytes, base64url without padding
        assert len(token) == 43
        assert set(token) <= set(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
        )


def test_expiry_is_seven_days_after_issue():
    now = datetime(2024, 3, 1, 12, 0, 0)
    issued = issue_token(now)

    assert INVITATION_EXPIRY_DAYS == 7
    assert issued.expires_at == now + timedelta(days=7)
