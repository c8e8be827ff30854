# portal/crud/organization.py
from typing import List, Optional

from sqlalchemy.orm import Session

from portal.models.organization import Organization
from portal.schemas.organization import BrandColors, OrganizationCreate
from portal.services.business_types import photo_tags_for
from portal.services.tenants import TenantProvisioner, build_settings


def get_organization(db: Session, organization_id: int) -> Optional[Organization]:
    return db.get(Organization, organization_id)


def list_organizations(db: Session, skip: int = 0, limit: int = 50) -> List[Organization]:
    return (
        db.query(Organization)
        .order_by(Organization.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def create_organization(db: Session, data: OrganizationCreate) -> Organization:
    """Staff-created organization; slug allocated like during provisioning."""
    photo_tags = data.custom_photo_tags or photo_tags_for(data.business_type)
    try:
        org = TenantProvisioner(db).create_organization(
            name=data.name.strip(),
            business_type=data.business_type,
            contact_name=data.contact_name,
            contact_email=str(data.contact_email) if data.contact_email else None,
            status=data.status,
            settings=build_settings(
                logo_url=data.logo_url,
                brand_colors=data.brand_colors,
                photo_tags=photo_tags,
            ),
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(org)
    return org


def update_branding(db: Session, org: Organization, brand_colors: BrandColors) -> Organization:
    """Replace brand colors in the organization's settings (caller commits)."""
    settings = dict(org.settings or {})
    settings["brand_colors"] = brand_colors.model_dump(exclude_none=True)
    # reassign so the JSON column is marked dirty
    org.settings = settings
    db.flush()
    return org
