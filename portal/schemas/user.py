# portal/schemas/user.py
from typing import Optional

from pydantic import BaseModel


class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    account_type: str
    organization_id: Optional[int] = None
    email_verified: bool

    class Config:
        from_attributes = True


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
