# portal/api/v1/projects.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from portal.core.auth import AuthorizationContext, get_db, require_admin_context
from portal.crud.project import create_project, get_project, list_projects
from portal.schemas.project import ProjectCreate, ProjectOut

router = APIRouter()


@router.get("/projects", response_model=List[ProjectOut])
def api_list_projects(
    organization_id: Optional[int] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    _: AuthorizationContext = Depends(require_admin_context),
):
    return list_projects(db, organization_id=organization_id, skip=skip, limit=limit)


@router.get("/projects/{project_id}", response_model=ProjectOut)
def api_get_project(
    project_id: int,
    db: Session = Depends(get_db),
    _: AuthorizationContext = Depends(require_admin_context),
):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("/projects", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def api_create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    _: AuthorizationContext = Depends(require_admin_context),
):
    return create_project(db, payload)
