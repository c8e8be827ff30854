# portal/models/project.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from portal.core.clock import utcnow
from portal.db.base import Base

PROJECT_STATUSES = ("planning", "in-progress", "on-hold", "completed", "cancelled")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    # nullable until the project is assigned to a client
    organization_id = Column(
        Integer, ForeignKey("organizations.id"), nullable=True, index=True
    )

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    client_name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="planning")

    start_date = Column(DateTime, nullable=True)
    target_end_date = Column(DateTime, nullable=True)
    actual_end_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    organization = relationship("Organization", backref="projects")
