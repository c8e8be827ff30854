# portal/schemas/organization.py
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

BusinessType = Literal[
    "fitness",
    "restaurant",
    "retail",
    "salon_spa",
    "professional_services",
    "other",
]

OrganizationStatus = Literal["lead", "active", "paused", "completed"]


class BrandColors(BaseModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    business_type: Optional[BusinessType] = None
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    status: OrganizationStatus = "active"
    logo_url: Optional[str] = None
    brand_colors: Optional[BrandColors] = None
    custom_photo_tags: Optional[List[str]] = None


class OrganizationOut(BaseModel):
    id: int
    name: str
    slug: str
    business_type: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    status: str
    settings: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
