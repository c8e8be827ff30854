# portal/crud/invitation.py
from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core import config
from portal.core.auth import AuthorizationContext
from portal.core.exceptions import (
    EmailTaken,
    InvalidBusinessType,
    InvalidToken,
    InvitationNotFound,
    InvitationNotPending,
    NoToken,
    NotDemoInvitation,
    OrganizationNotFound,
    PendingInvitationExists,
    ProjectNotFound,
    TokenMismatch,
)
from portal.crud.organization import get_organization, update_branding
from portal.models.invitation import Invitation
from portal.models.organization import Organization
from portal.models.project import Project
from portal.models.user import User
from portal.schemas.invitation import InvitationCreate
from portal.services.business_types import BUSINESS_TYPES, is_business_type, photo_tags_for
from portal.services.slugs import require_slug
from portal.services.tokens import issue_token

log = logging.getLogger("portal.invitations")

MAX_TOKEN_ATTEMPTS = 3


def build_invite_link(token: str) -> str:
    return f"{config.APP_BASE_URL}/accept-invite?token={token}"


def get_invitation(db: Session, invitation_id: int) -> Optional[Invitation]:
    return db.get(Invitation, invitation_id)


def list_invitations(db: Session, ctx: AuthorizationContext) -> List[Invitation]:
    ctx.require_admin()
    return (
        db.query(Invitation)
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
        .all()
    )


def _pending_exists(db: Session, email: str) -> bool:
    return (
        db.query(Invitation.id)
        .filter(Invitation.email == email, Invitation.status == "pending")
        .first()
        is not None
    )


def _insert_with_fresh_token(
    db: Session, invitation: Invitation, now: Optional[datetime]
) -> None:
    """Assign a token and insert; a token collision draws a new one."""
    for _ in range(MAX_TOKEN_ATTEMPTS):
        issued = issue_token(now)
        invitation.token = issued.token
        invitation.expires_at = issued.expires_at
        try:
            with db.begin_nested():
                db.add(invitation)
                db.flush()
        except IntegrityError:
            log.warning("invitation token collision, drawing a new one")
            continue
        return
    raise InvalidToken("Could not issue a unique invitation token")


def create_invitation(
    db: Session,
    payload: InvitationCreate,
    ctx: AuthorizationContext,
    *,
    now: Optional[datetime] = None,
) -> Tuple[Invitation, Optional[Organization]]:
    """
    Persist a pending invitation. Returns it with the organization it is
    bound to (explicit or inherited from the project), if any.

    Business rules:
      - one pending invitation per email, and never for an existing user
      - a project without an explicit organization lends its organization
      - setup data is kept only when no organization was resolved
    """
    ctx.require_admin()

    email = str(payload.email).strip().lower()
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        raise EmailTaken("A user with this email already exists")
    if _pending_exists(db, email):
        raise PendingInvitationExists()

    organization: Optional[Organization] = None
    organization_id = payload.organization_id
    if organization_id is not None:
        organization = get_organization(db, organization_id)
        if organization is None:
            raise OrganizationNotFound()

    if payload.project_id is not None:
        project = db.get(Project, payload.project_id)
        if project is None:
            raise ProjectNotFound()
        if project.organization_id and organization_id is None:
            organization_id = project.organization_id
            organization = get_organization(db, organization_id)

    if payload.brand_colors is not None and organization is not None:
        update_branding(db, organization, payload.brand_colors)

    setup_data = None
    if payload.organization_data is not None and organization_id is None:
        business_name = payload.organization_data.business_name.strip()
        require_slug(business_name)
        setup_data = payload.organization_data.model_copy(
            update={"business_name": business_name}
        ).model_dump(exclude_none=True)

    invitation = Invitation(
        email=email,
        name=payload.name,
        organization_id=organization_id,
        project_id=payload.project_id,
        organization_data=setup_data,
        role=payload.role,
        account_type=payload.account_type,
        status="pending",
        is_demo=bool(payload.is_demo),
        invited_by=ctx.actor_id,
        message=payload.message,
    )
    try:
        _insert_with_fresh_token(db, invitation, now)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(invitation)
    log.info("invitation %s created for %s by user %s", invitation.id, email, ctx.actor_id)
    return invitation, organization


def resend_invitation(
    db: Session,
    invitation_id: int,
    ctx: AuthorizationContext,
    *,
    now: Optional[datetime] = None,
) -> Invitation:
    """Rotate token and expiry of a pending invitation; the old link stops working."""
    ctx.require_admin()

    invitation = get_invitation(db, invitation_id)
    if invitation is None:
        raise InvitationNotFound()
    if invitation.status != "pending":
        raise InvitationNotPending(
            f"Cannot resend invitation with status: {invitation.status}"
        )

    issued = issue_token(now)
    invitation.token = issued.token
    invitation.expires_at = issued.expires_at
    db.commit()
    db.refresh(invitation)
    log.info("invitation %s resent by user %s", invitation.id, ctx.actor_id)
    return invitation


def update_business_type(
    db: Session, invitation_id: int, token: str, business_type: str
) -> Tuple[Invitation, List[str]]:
    """
    Demo flow: the invitee picks their business type before signing up.
    Proven by the invitation token instead of a session.
    """
    if not token:
        raise NoToken()
    if not is_business_type(business_type):
        raise InvalidBusinessType(details={"available_types": list(BUSINESS_TYPES)})

    invitation = get_invitation(db, invitation_id)
    if invitation is None:
        raise InvitationNotFound()
    if not secrets.compare_digest(invitation.token.encode(), token.encode()):
        raise TokenMismatch()
    if not invitation.is_demo:
        raise NotDemoInvitation()
    if invitation.status != "pending":
        raise InvitationNotPending("This invitation is no longer valid")

    photo_tags = photo_tags_for(business_type)
    if invitation.organization_data:
        data = dict(invitation.organization_data)
        data["business_type"] = business_type
        data["custom_photo_tags"] = photo_tags
        invitation.organization_data = data
        db.commit()
        db.refresh(invitation)
    return invitation, photo_tags
