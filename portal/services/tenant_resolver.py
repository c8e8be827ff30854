# portal/services/tenant_resolver.py
"""
Decide which organization / project an accepted invitation lands in.

Priority (first match wins):
  1. pre-assigned project that already belongs to an organization
  2. explicit organization_id on the invitation
  3. embedded OrganizationSetupData -> create a new organization
  4. nothing -> user without organization

``resolve_tenant`` only reads the invitation's stored fields and the
pre-assigned project, so a retried acceptance resolves identically.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from portal.models.invitation import Invitation
from portal.models.project import Project
from portal.schemas.invitation import OrganizationSetupData

SOURCE_PROJECT = "project"
SOURCE_ORGANIZATION = "organization"
SOURCE_SETUP_DATA = "setup_data"
SOURCE_NONE = "none"


@dataclass(frozen=True)
class ProjectDraft:
    name: str
    client_name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class TenantPlan:
    source: str
    organization_id: Optional[int] = None
    project_id: Optional[int] = None
    organization_to_create: Optional[OrganizationSetupData] = None
    project_to_create: Optional[ProjectDraft] = None
    # pre-assigned project has no organization yet; attach it to the resolved one
    link_project: bool = False


def load_setup_data(raw: Optional[Mapping[str, Any]]) -> Optional[OrganizationSetupData]:
    if not raw:
        return None
    return OrganizationSetupData.model_validate(raw)


def load_assigned_project(db: Session, invitation: Invitation) -> Optional[Project]:
    if invitation.project_id is None:
        return None
    return db.get(Project, invitation.project_id)


def default_project_draft(setup: OrganizationSetupData) -> ProjectDraft:
    return ProjectDraft(
        name=setup.project_name or f"{setup.business_name} Website",
        client_name=setup.business_name,
        description=f"Web development project for {setup.business_name}",
    )


def resolve_tenant(
    invitation: Invitation, assigned_project: Optional[Project] = None
) -> TenantPlan:
    project_id = assigned_project.id if assigned_project is not None else None

    if assigned_project is not None and assigned_project.organization_id:
        # the project's organization wins; embedded setup data is ignored
        return TenantPlan(
            source=SOURCE_PROJECT,
            organization_id=assigned_project.organization_id,
            project_id=project_id,
        )

    if invitation.organization_id:
        return TenantPlan(
            source=SOURCE_ORGANIZATION,
            organization_id=invitation.organization_id,
            project_id=project_id,
            link_project=project_id is not None,
        )

    setup = load_setup_data(invitation.organization_data)
    if setup is not None:
        draft = None
        if assigned_project is None and setup.create_project:
            draft = default_project_draft(setup)
        return TenantPlan(
            source=SOURCE_SETUP_DATA,
            project_id=project_id,
            organization_to_create=setup,
            project_to_create=draft,
            link_project=project_id is not None,
        )

    return TenantPlan(source=SOURCE_NONE, project_id=project_id)
