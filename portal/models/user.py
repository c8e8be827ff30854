# portal/models/user.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Boolean,
    text,
)
from sqlalchemy.orm import relationship

from portal.core.clock import utcnow
from portal.db.base import Base

USER_ROLES = ("admin", "staff", "client")
ACCOUNT_TYPES = ("team_lead", "team_member")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)

    # Tenancy / RBAC
    organization_id = Column(
        Integer, ForeignKey("organizations.id"), nullable=True, index=True
    )
    role = Column(String(20), nullable=False, default="client", index=True)
    account_type = Column(String(20), nullable=False, default="team_member")

    # Status
    email_verified = Column(Boolean, nullable=False, server_default=text("0"))
    is_active = Column(Boolean, nullable=False, server_default=text("1"))

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    organization = relationship("Organization", backref="users")
    credential_account = relationship(
        "CredentialAccount", back_populates="user", uselist=False
    )
