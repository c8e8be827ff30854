# portal/crud/project.py
from typing import List, Optional

from sqlalchemy.orm import Session

from portal.core.exceptions import OrganizationNotFound
from portal.models.organization import Organization
from portal.models.project import Project
from portal.schemas.project import ProjectCreate


def get_project(db: Session, project_id: int) -> Optional[Project]:
    return db.get(Project, project_id)


def list_projects(
    db: Session, organization_id: Optional[int] = None, skip: int = 0, limit: int = 50
) -> List[Project]:
    q = db.query(Project)
    if organization_id is not None:
        q = q.filter(Project.organization_id == organization_id)
    return q.order_by(Project.id.desc()).offset(skip).limit(limit).all()


def create_project(db: Session, data: ProjectCreate) -> Project:
    if data.organization_id is not None and db.get(Organization, data.organization_id) is None:
        raise OrganizationNotFound()

    obj = Project(
        organization_id=data.organization_id,
        name=data.name,
        description=data.description,
        client_name=data.client_name,
        status=data.status,
        start_date=data.start_date,
        target_end_date=data.target_end_date,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
