# portal/services/tenants.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.exceptions import SlugExhausted
from portal.models.organization import Organization
from portal.models.project import Project
from portal.schemas.invitation import OrganizationSetupData
from portal.schemas.organization import BrandColors
from portal.services.business_types import photo_tags_for
from portal.services.slugs import allocate_slug
from portal.services.tenant_resolver import ProjectDraft

log = logging.getLogger("portal.tenants")

MAX_SLUG_ATTEMPTS = 25


def build_settings(
    *,
    logo_url: Optional[str] = None,
    logo_key: Optional[str] = None,
    brand_colors: Optional[BrandColors] = None,
    photo_tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    settings: Dict[str, Any] = {}
    if logo_url:
        settings["logo"] = logo_url
    if logo_key:
        settings["logo_key"] = logo_key
    if brand_colors is not None:
        settings["brand_colors"] = brand_colors.model_dump(exclude_none=True)
    if photo_tags is not None:
        settings["photo_tags"] = list(photo_tags)
    return settings


class TenantProvisioner:
    """
    Inserts organizations and projects inside the caller's transaction.
    Flushes but never commits.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_organization(
        self,
        *,
        name: str,
        business_type: Optional[str] = None,
        contact_name: Optional[str] = None,
        contact_email: Optional[str] = None,
        status: str = "active",
        settings: Optional[Dict[str, Any]] = None,
    ) -> Organization:
        tried: set = set()
        for _ in range(MAX_SLUG_ATTEMPTS):
            slug = allocate_slug(self.db, name, exclude=tried)
            org = Organization(
                name=name,
                slug=slug,
                business_type=business_type,
                contact_name=contact_name,
                contact_email=contact_email,
                status=status,
                settings=settings or {},
            )
            try:
                with self.db.begin_nested():
                    self.db.add(org)
                    self.db.flush()
            except IntegrityError:
                log.info("slug %r taken at insert time, trying next candidate", slug)
                tried.add(slug)
                continue
            return org
        raise SlugExhausted()

    def create_organization_from_setup(
        self,
        setup: OrganizationSetupData,
        *,
        contact_name: Optional[str] = None,
        contact_email: Optional[str] = None,
    ) -> Organization:
        photo_tags = setup.custom_photo_tags or photo_tags_for(setup.business_type)
        return self.create_organization(
            name=setup.business_name,
            business_type=setup.business_type,
            contact_name=setup.contact_name or contact_name,
            contact_email=contact_email,
            settings=build_settings(
                logo_url=setup.logo_url,
                logo_key=setup.logo_key,
                brand_colors=setup.brand_colors,
                photo_tags=photo_tags,
            ),
        )

    def create_project(self, draft: ProjectDraft, *, organization_id: Optional[int]) -> Project:
        project = Project(
            organization_id=organization_id,
            name=draft.name,
            description=draft.description,
            client_name=draft.client_name,
            status="planning",
        )
        self.db.add(project)
        self.db.flush()
        return project

    def assign_project(self, project: Project, organization_id: int) -> Project:
        project.organization_id = organization_id
        self.db.flush()
        return project
