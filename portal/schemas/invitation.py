# portal/schemas/invitation.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from portal.schemas.organization import BrandColors, BusinessType, OrganizationOut
from portal.schemas.project import ProjectOut

Role = Literal["admin", "staff", "client"]
AccountType = Literal["team_lead", "team_member"]
InvitationStatus = Literal["pending", "accepted", "expired", "revoked"]


class OrganizationSetupData(BaseModel):
    """
    Everything needed to build a brand-new organization at acceptance time.
    Stored as JSON on the invitation.
    """

    business_name: str = ""
    business_type: Optional[BusinessType] = None
    contact_name: Optional[str] = None

    logo_url: Optional[str] = None
    logo_key: Optional[str] = None
    brand_colors: Optional[BrandColors] = None

    # overrides the business-type default tag set
    custom_photo_tags: Optional[List[str]] = None

    # default project; opt out with create_project=False
    project_name: Optional[str] = None
    create_project: bool = True


class InvitationCreate(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    organization_id: Optional[int] = None
    project_id: Optional[int] = None
    organization_data: Optional[OrganizationSetupData] = None
    # branding for an existing organization (applied at creation, never on accept)
    brand_colors: Optional[BrandColors] = None
    role: Role = "client"
    account_type: AccountType = "team_member"
    is_demo: bool = False
    message: Optional[str] = None


class InvitationOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    token: str
    organization_id: Optional[int] = None
    project_id: Optional[int] = None
    organization_data: Optional[OrganizationSetupData] = None
    role: str
    account_type: str
    status: InvitationStatus
    is_demo: bool
    invited_by: Optional[int] = None
    message: Optional[str] = None
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvitationListItem(InvitationOut):
    organization: Optional[OrganizationOut] = None


class InvitationPublic(BaseModel):
    """What the accept page may see. Never includes the token."""

    id: int
    email: str
    name: Optional[str] = None
    organization_id: Optional[int] = None
    organization_data: Optional[OrganizationSetupData] = None
    role: str
    account_type: str
    status: InvitationStatus
    is_demo: bool
    expires_at: datetime

    class Config:
        from_attributes = True


class InvitationValidateOut(BaseModel):
    invitation: InvitationPublic


class InvitationIssuedOut(BaseModel):
    invitation: InvitationOut
    email_sent: bool
    invite_link: str


class InvitationAccept(BaseModel):
    # defaults let the service answer NO_TOKEN / WEAK_PASSWORD instead of a 422
    token: str = ""
    password: str = ""
    name: Optional[str] = Field(default=None, max_length=255)


class AutoLogin(BaseModel):
    email: str
    password: str


class AcceptedUser(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    account_type: str
    organization_id: Optional[int] = None

    class Config:
        from_attributes = True


class InvitationAcceptOut(BaseModel):
    success: bool = True
    auto_login: AutoLogin
    user: AcceptedUser
    organization: Optional[OrganizationOut] = None
    project: Optional[ProjectOut] = None
    email_sent: bool


class BusinessTypeUpdate(BaseModel):
    token: str = ""
    business_type: str


class BusinessTypeUpdateOut(BaseModel):
    success: bool = True
    id: int
    organization_data: Optional[OrganizationSetupData] = None
    photo_tags: List[str]
