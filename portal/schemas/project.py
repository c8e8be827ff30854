# portal/schemas/project.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ProjectStatus = Literal["planning", "in-progress", "on-hold", "completed", "cancelled"]


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    client_name: str = Field(..., min_length=1, max_length=255)
    organization_id: Optional[int] = None
    description: Optional[str] = None
    status: ProjectStatus = "planning"
    start_date: Optional[datetime] = None
    target_end_date: Optional[datetime] = None


class ProjectOut(BaseModel):
    id: int
    organization_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    client_name: str
    status: str
    start_date: Optional[datetime] = None
    target_end_date: Optional[datetime] = None

    class Config:
        from_attributes = True
