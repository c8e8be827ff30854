# portal/api/v1/invitations.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from portal.core import config
from portal.core.auth import AuthorizationContext, get_db, require_admin_context
from portal.crud.invitation import (
    build_invite_link,
    create_invitation,
    list_invitations,
    resend_invitation,
    update_business_type,
)
from portal.models.invitation import Invitation
from portal.models.organization import Organization
from portal.schemas.invitation import (
    AcceptedUser,
    AutoLogin,
    BusinessTypeUpdate,
    BusinessTypeUpdateOut,
    InvitationAccept,
    InvitationAcceptOut,
    InvitationCreate,
    InvitationIssuedOut,
    InvitationListItem,
    InvitationOut,
    InvitationPublic,
    InvitationValidateOut,
)
from portal.schemas.organization import OrganizationOut
from portal.schemas.project import ProjectOut
from portal.services.audit import audit_log, ip_from_request
from portal.services.invitation_state import revoke, validate_token
from portal.services.notifications import (
    NotificationDispatcher,
    get_notifier,
    notify_safely,
)
from portal.services.provisioning import accept_invitation

router = APIRouter()


def _branding(
    invitation: Invitation, organization: Optional[Organization]
) -> Dict[str, Any]:
    """Name, colors and logo for the invitation email."""
    if organization is not None:
        settings = organization.settings or {}
        return {
            "organization_name": organization.name,
            "brand_colors": settings.get("brand_colors"),
            "logo_url": settings.get("logo"),
        }
    setup = invitation.organization_data or {}
    return {
        "organization_name": setup.get("business_name") or None,
        "brand_colors": setup.get("brand_colors"),
        "logo_url": setup.get("logo_url"),
    }


def _send_invitation_email(
    notifier: NotificationDispatcher,
    invitation: Invitation,
    organization: Optional[Organization],
    ctx: AuthorizationContext,
) -> bool:
    return notify_safely(
        notifier.send_invitation,
        to=invitation.email,
        invite_link=build_invite_link(invitation.token),
        expires_at=invitation.expires_at,
        invitee_name=invitation.name,
        inviter_name=ctx.name,
        message=invitation.message,
        **_branding(invitation, organization),
    )


@router.get("/invitations", response_model=List[InvitationListItem])
def api_list_invitations(
    db: Session = Depends(get_db),
    ctx: AuthorizationContext = Depends(require_admin_context),
):
    return list_invitations(db, ctx)


@router.post(
    "/invitations",
    response_model=InvitationIssuedOut,
    status_code=status.HTTP_201_CREATED,
)
def api_create_invitation(
    payload: InvitationCreate,
    request: Request,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext = Depends(require_admin_context),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    invitation, organization = create_invitation(db, payload, ctx)
    email_sent = _send_invitation_email(notifier, invitation, organization, ctx)

    audit_log(
        db,
        organization_id=invitation.organization_id,
        user_id=ctx.actor_id,
        action="INVITATION_CREATED",
        entity_type="invitation",
        entity_id=invitation.id,
        meta={
            "email": invitation.email,
            "role": invitation.role,
            "is_demo": invitation.is_demo,
            "email_sent": email_sent,
        },
        ip=ip_from_request(request),
    )

    return InvitationIssuedOut(
        invitation=InvitationOut.model_validate(invitation),
        email_sent=email_sent,
        invite_link=build_invite_link(invitation.token),
    )


@router.get("/invitations/validate", response_model=InvitationValidateOut)
def api_validate_invitation(
    token: Optional[str] = Query(None, description="Token from the invitation link"),
    db: Session = Depends(get_db),
):
    invitation = validate_token(db, token)
    return InvitationValidateOut(invitation=InvitationPublic.model_validate(invitation))


@router.post("/invitations/accept", response_model=InvitationAcceptOut)
def api_accept_invitation(
    payload: InvitationAccept,
    request: Request,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    result = accept_invitation(db, payload.token, payload.password, payload.name)
    user = result.user

    email_sent = notify_safely(
        notifier.send_welcome,
        to=user.email,
        login_url=f"{config.APP_BASE_URL}/login",
        name=user.name,
    )

    ip = ip_from_request(request)
    organization_id = result.organization.id if result.organization else None
    if result.organization_created:
        audit_log(
            db,
            organization_id=organization_id,
            user_id=user.id,
            action="ORGANIZATION_CREATED",
            entity_type="organization",
            entity_id=organization_id,
            meta={"slug": result.organization.slug, "invitation_id": result.invitation.id},
            ip=ip,
        )
    audit_log(
        db,
        organization_id=organization_id,
        user_id=user.id,
        action="INVITATION_ACCEPTED",
        entity_type="invitation",
        entity_id=result.invitation.id,
        meta={
            "email": user.email,
            "project_id": result.project.id if result.project else None,
            "project_created": result.project_created,
        },
        ip=ip,
    )

    return InvitationAcceptOut(
        auto_login=AutoLogin(email=user.email, password=payload.password),
        user=AcceptedUser.model_validate(user),
        organization=(
            OrganizationOut.model_validate(result.organization)
            if result.organization
            else None
        ),
        project=ProjectOut.model_validate(result.project) if result.project else None,
        email_sent=email_sent,
    )


@router.delete("/invitations/{invitation_id}")
def api_revoke_invitation(
    invitation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext = Depends(require_admin_context),
):
    invitation = revoke(db, invitation_id)

    audit_log(
        db,
        organization_id=invitation.organization_id,
        user_id=ctx.actor_id,
        action="INVITATION_REVOKED",
        entity_type="invitation",
        entity_id=invitation.id,
        meta={"email": invitation.email},
        ip=ip_from_request(request),
    )
    return {
        "success": True,
        "invitation": InvitationOut.model_validate(invitation).model_dump(mode="json"),
    }


@router.post("/invitations/{invitation_id}/resend", response_model=InvitationIssuedOut)
def api_resend_invitation(
    invitation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext = Depends(require_admin_context),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    invitation = resend_invitation(db, invitation_id, ctx)
    email_sent = _send_invitation_email(notifier, invitation, invitation.organization, ctx)

    audit_log(
        db,
        organization_id=invitation.organization_id,
        user_id=ctx.actor_id,
        action="INVITATION_RESENT",
        entity_type="invitation",
        entity_id=invitation.id,
        meta={"email": invitation.email, "email_sent": email_sent},
        ip=ip_from_request(request),
    )

    return InvitationIssuedOut(
        invitation=InvitationOut.model_validate(invitation),
        email_sent=email_sent,
        invite_link=build_invite_link(invitation.token),
    )


@router.post(
    "/invitations/{invitation_id}/business-type",
    response_model=BusinessTypeUpdateOut,
)
def api_update_business_type(
    invitation_id: int,
    payload: BusinessTypeUpdate,
    db: Session = Depends(get_db),
):
    invitation, photo_tags = update_business_type(
        db, invitation_id, payload.token, payload.business_type
    )
    return BusinessTypeUpdateOut(
        id=invitation.id,
        organization_data=invitation.organization_data,
        photo_tags=photo_tags,
    )
