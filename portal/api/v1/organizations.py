# portal/api/v1/organizations.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from portal.core.auth import AuthorizationContext, get_db, require_admin_context
from portal.crud.organization import create_organization, get_organization, list_organizations
from portal.schemas.organization import OrganizationCreate, OrganizationOut
from portal.services.audit import audit_log, ip_from_request

router = APIRouter()


@router.get("/organizations", response_model=List[OrganizationOut])
def api_list_organizations(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    _: AuthorizationContext = Depends(require_admin_context),
):
    return list_organizations(db, skip=skip, limit=limit)


@router.get("/organizations/{organization_id}", response_model=OrganizationOut)
def api_get_organization(
    organization_id: int,
    db: Session = Depends(get_db),
    _: AuthorizationContext = Depends(require_admin_context),
):
    org = get_organization(db, organization_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


@router.post(
    "/organizations",
    response_model=OrganizationOut,
    status_code=status.HTTP_201_CREATED,
)
def api_create_organization(
    payload: OrganizationCreate,
    request: Request,
    db: Session = Depends(get_db),
    ctx: AuthorizationContext = Depends(require_admin_context),
):
    org = create_organization(db, payload)
    audit_log(
        db,
        organization_id=org.id,
        user_id=ctx.actor_id,
        action="ORGANIZATION_CREATED",
        entity_type="organization",
        entity_id=org.id,
        meta={"slug": org.slug, "name": org.name},
        ip=ip_from_request(request),
    )
    return org
