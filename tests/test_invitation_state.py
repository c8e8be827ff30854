from datetime import timedelta

import pytest

from portal.core.clock import utcnow
from portal.core.exceptions import (
    AlreadyAccepted,
    Expired,
    InvalidToken,
    InvitationNotFound,
    InvitationNotPending,
    NoToken,
    Revoked,
)
from portal.models.invitation import Invitation
from portal.services.invitation_state import mark_accepted, revoke, validate_token


def _status(session_factory, invitation_id):
    with session_factory() as session:
        return session.get(Invitation, invitation_id).status


def test_validate_returns_pending_invitation(db, make_invitation):
    invitation = make_invitation()

    assert validate_token(db, invitation.token).id == invitation.id


def test_validate_requires_a_known_token(db, make_invitation):
    make_invitation()

    with pytest.raises(NoToken):
        validate_token(db, "")
    with pytest.raises(NoToken):
        validate_token(db, None)
    with pytest.raises(InvalidToken):
        validate_token(db, "not-a-real-token")


def test_expired_invitation_is_persisted_as_expired(db, session_factory, make_invitation):
    invitation = make_invitation()
    later = invitation.expires_at + timedelta(seconds=1)

    with pytest.raises(Expired):
        validate_token(db, invitation.token, now=later)

    assert _status(session_factory, invitation.id) == "expired"

    # once expired it never becomes valid again, whatever the clock says
    with pytest.raises(Expired):
        validate_token(db, invitation.token, now=utcnow() - timedelta(days=30))


def test_validate_at_exact_expiry_is_still_valid(db, make_invitation):
    invitation = make_invitation()

    assert validate_token(db, invitation.token, now=invitation.expires_at).status == "pending"


def test_revoke_pending_invitation(db, session_factory, make_invitation):
    invitation = make_invitation()

    revoked = revoke(db, invitation.id)

    assert revoked.status == "revoked"
    assert _status(session_factory, invitation.id) == "revoked"
    with pytest.raises(Revoked):
        validate_token(db, invitation.token)


def test_revoke_rejects_terminal_and_unknown_invitations(db, make_invitation):
    invitation = make_invitation(status="accepted")

    with pytest.raises(InvitationNotPending) as exc_info:
        revoke(db, invitation.id)
    assert "accepted" in exc_info.value.message

    with pytest.raises(InvitationNotFound):
        revoke(db, 9999)


def test_mark_accepted_only_once(db, make_invitation):
    invitation = make_invitation()

    mark_accepted(db, invitation)
    db.commit()
    assert invitation.status == "accepted"
    assert invitation.accepted_at is not None

    with pytest.raises(AlreadyAccepted):
        mark_accepted(db, invitation)
