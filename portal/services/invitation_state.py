# portal/services/invitation_state.py
"""
Invitation lifecycle.

    pending -> accepted | expired | revoked

All three targets are terminal. Every transition is a conditional UPDATE
guarded by ``status = 'pending'`` so a stale in-memory copy can never move a
row backwards or from one terminal state to another.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from portal.core.clock import utcnow
from portal.core.exceptions import (
    AlreadyAccepted,
    Expired,
    InvalidToken,
    InvitationError,
    InvitationNotFound,
    InvitationNotPending,
    NoToken,
    Revoked,
)
from portal.models.invitation import Invitation

log = logging.getLogger("portal.invitations")

_TERMINAL_ERRORS = {
    "accepted": AlreadyAccepted,
    "revoked": Revoked,
    "expired": Expired,
}


def get_invitation_by_token(db: Session, token: str) -> Optional[Invitation]:
    return db.query(Invitation).filter(Invitation.token == token).first()


def terminal_error(invitation: Invitation) -> Optional[InvitationError]:
    """The error matching a terminal status, None while pending."""
    err = _TERMINAL_ERRORS.get(invitation.status)
    return err() if err is not None else None


def raise_for_status(invitation: Invitation) -> None:
    err = terminal_error(invitation)
    if err is not None:
        raise err


def _transition(
    db: Session, invitation: Invitation, target: str, **values
) -> bool:
    """Move a pending row to ``target``. Returns False if it was no longer pending."""
    values.setdefault("updated_at", utcnow())
    matched = (
        db.query(Invitation)
        .filter(Invitation.id == invitation.id, Invitation.status == "pending")
        .update({"status": target, **values}, synchronize_session="evaluate")
    )
    return matched == 1


def validate_token(
    db: Session, token: Optional[str], *, now: Optional[datetime] = None
) -> Invitation:
    """
    Return the pending invitation behind ``token`` or raise.

    A pending invitation past its expiry is flipped to ``expired`` and the
    change is committed before ``Expired`` is raised.
    """
    if not token:
        raise NoToken()

    invitation = get_invitation_by_token(db, token)
    if invitation is None:
        raise InvalidToken()

    raise_for_status(invitation)

    now = now or utcnow()
    if now > invitation.expires_at:
        if not _transition(db, invitation, "expired", updated_at=now):
            # lost a race with another terminal transition; report that one
            db.rollback()
            db.refresh(invitation)
            raise_for_status(invitation)
        db.commit()
        log.info("invitation %s expired on read", invitation.id)
        raise Expired()

    return invitation


def revoke(db: Session, invitation_id: int, *, now: Optional[datetime] = None) -> Invitation:
    invitation = db.get(Invitation, invitation_id)
    if invitation is None:
        raise InvitationNotFound()

    if invitation.status != "pending" or not _transition(
        db, invitation, "revoked", updated_at=now or utcnow()
    ):
        db.rollback()
        db.refresh(invitation)
        raise InvitationNotPending(
            f"Cannot revoke invitation with status: {invitation.status}"
        )

    db.commit()
    db.refresh(invitation)
    log.info("invitation %s revoked", invitation.id)
    return invitation


def mark_accepted(
    db: Session, invitation: Invitation, *, now: Optional[datetime] = None
) -> None:
    """
    Flip to ``accepted`` inside the caller's transaction (no commit).
    Raises ``AlreadyAccepted`` when the row is no longer pending.
    """
    now = now or utcnow()
    if not _transition(db, invitation, "accepted", accepted_at=now, updated_at=now):
        raise AlreadyAccepted()
