# portal/services/tokens.py
from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from portal.core.clock import utcnow

INVITATION_EXPIRY_DAYS = 7
TOKEN_BYTES = 32  # 256 bits of source randomness


class IssuedToken(NamedTuple):
    token: str
    expires_at: datetime


def issue_token(now: Optional[datetime] = None) -> IssuedToken:
    """Fresh single-use invitation token (URL-safe base64) and its expiry."""
    now = now or utcnow()
    return IssuedToken(
        token=secrets.token_urlsafe(TOKEN_BYTES),
        expires_at=now + timedelta(days=INVITATION_EXPIRY_DAYS),
    )
