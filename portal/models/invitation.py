# portal/models/invitation.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship

from portal.core.clock import utcnow
from portal.db.base import Base

INVITATION_STATUSES = ("pending", "accepted", "expired", "revoked")
TERMINAL_STATUSES = frozenset({"accepted", "expired", "revoked"})


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), nullable=False, index=True)  # always lowercased
    name = Column(String(255), nullable=True)

    token = Column(String(128), unique=True, nullable=False, index=True)

    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    # OrganizationSetupData, only when no organization was resolved at creation
    organization_data = Column(JSON, nullable=True)

    role = Column(String(20), nullable=False, default="client")
    account_type = Column(String(20), nullable=False, default="team_member")
    status = Column(String(20), nullable=False, default="pending", index=True)
    is_demo = Column(Boolean, nullable=False, default=False)

    invited_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    message = Column(Text, nullable=True)

    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    organization = relationship("Organization")
    project = relationship("Project")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
