# portal/services/provisioning.py
"""
Invitation acceptance: turn a pending invitation into an organization,
project, user and credential account in one transaction.

Preconditions (no writes before these pass, except the two documented ones):
  1. password length
  2. token validation (may persist pending -> expired)
  3. no user with the invitation's email (marks the invitation accepted)

Then, in a single transaction: resolve tenant, create organization (+ default
project), hash password, insert user and credential account, and finally flip
the invitation to ``accepted``. Any failure rolls everything back and leaves
the invitation pending, so the whole call can be retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.clock import utcnow
from portal.core.exceptions import AlreadyAccepted, EmailTaken, WeakPassword
from portal.core.security import get_password_hash
from portal.models.credential_account import CredentialAccount, CREDENTIAL_PROVIDER
from portal.models.invitation import Invitation
from portal.models.organization import Organization
from portal.models.project import Project
from portal.models.user import User
from portal.services.invitation_state import (
    get_invitation_by_token,
    mark_accepted,
    terminal_error,
    validate_token,
)
from portal.services.tenant_resolver import load_assigned_project, resolve_tenant
from portal.services.tenants import TenantProvisioner

log = logging.getLogger("portal.provisioning")

MIN_PASSWORD_LENGTH = 8


@dataclass
class ProvisioningResult:
    invitation: Invitation
    user: User
    organization: Optional[Organization] = None
    project: Optional[Project] = None
    organization_created: bool = False
    project_created: bool = False


def _user_exists(db: Session, email: str) -> bool:
    return (
        db.query(User.id).filter(func.lower(User.email) == email.lower()).first()
        is not None
    )


def _create_user(
    db: Session, invitation: Invitation, name: Optional[str], organization_id: Optional[int]
) -> User:
    user = User(
        email=invitation.email,
        name=name or invitation.name,
        role=invitation.role,
        account_type=invitation.account_type or "team_member",
        organization_id=organization_id,
        # possession of the emailed link proves the address
        email_verified=True,
    )
    db.add(user)
    db.flush()
    return user


def _create_credential_account(db: Session, user: User, password_hash: str) -> CredentialAccount:
    account = CredentialAccount(
        user_id=user.id,
        account_id=user.email,
        provider_id=CREDENTIAL_PROVIDER,
        password_hash=password_hash,
    )
    db.add(account)
    db.flush()
    return account


def _provision(
    db: Session,
    invitation: Invitation,
    password: str,
    name: Optional[str],
    now: datetime,
) -> ProvisioningResult:
    assigned_project = load_assigned_project(db, invitation)
    plan = resolve_tenant(invitation, assigned_project)
    provisioner = TenantProvisioner(db)

    organization_id = plan.organization_id
    organization: Optional[Organization] = None
    project: Optional[Project] = assigned_project
    organization_created = project_created = False

    if plan.organization_to_create is not None:
        organization = provisioner.create_organization_from_setup(
            plan.organization_to_create,
            contact_name=name or invitation.name,
            contact_email=invitation.email,
        )
        organization_id = organization.id
        organization_created = True
        # provenance only; resolution never reads it back for this invitation
        invitation.organization_id = organization_id
    elif organization_id is not None:
        organization = db.get(Organization, organization_id)

    if plan.project_to_create is not None and organization_id is not None:
        project = provisioner.create_project(
            plan.project_to_create, organization_id=organization_id
        )
        project_created = True

    if (
        plan.link_project
        and assigned_project is not None
        and assigned_project.organization_id is None
        and organization_id is not None
    ):
        provisioner.assign_project(assigned_project, organization_id)

    password_hash = get_password_hash(password)
    user = _create_user(db, invitation, name, organization_id)
    _create_credential_account(db, user, password_hash)

    # commit point: must stay the last mutation
    mark_accepted(db, invitation, now=now)
    return ProvisioningResult(
        invitation=invitation,
        user=user,
        organization=organization,
        project=project,
        organization_created=organization_created,
        project_created=project_created,
    )


def _close_stale(db: Session, invitation: Invitation, now: datetime) -> None:
    """A user with this email exists: stop listing the invitation as pending."""
    try:
        mark_accepted(db, invitation, now=now)
    except AlreadyAccepted:
        db.rollback()
        return
    db.commit()
    log.info("invitation %s closed: user %s already exists", invitation.id, invitation.email)


def _conflict_error(
    db: Session, token: str, email: str, now: datetime
) -> Optional[Exception]:
    """Translate a unique-constraint race into the state the winner left behind."""
    invitation = get_invitation_by_token(db, token)
    if _user_exists(db, email):
        if invitation is not None and invitation.status == "pending":
            _close_stale(db, invitation, now)
        return EmailTaken()
    if invitation is None:
        return None
    return terminal_error(invitation)


def accept_invitation(
    db: Session,
    token: Optional[str],
    password: Optional[str],
    name: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> ProvisioningResult:
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword()

    now = now or utcnow()
    invitation = validate_token(db, token, now=now)
    email = invitation.email

    if _user_exists(db, email):
        _close_stale(db, invitation, now)
        raise EmailTaken()

    try:
        result = _provision(db, invitation, password, name, now)
        db.commit()
    except IntegrityError:
        db.rollback()
        conflict = _conflict_error(db, token, email, now)
        if conflict is None:
            raise
        log.warning("invitation %s lost an acceptance race: %s", invitation.id, conflict)
        raise conflict
    except Exception:
        db.rollback()
        raise

    log.info(
        "invitation %s accepted: user=%s organization=%s (created=%s) project=%s (created=%s)",
        result.invitation.id,
        result.user.id,
        result.organization.id if result.organization else None,
        result.organization_created,
        result.project.id if result.project else None,
        result.project_created,
    )
    return result
