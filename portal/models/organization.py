# portal/models/organization.py
from sqlalchemy import Column, Integer, String, DateTime, JSON

from portal.core.clock import utcnow
from portal.db.base import Base

ORGANIZATION_STATUSES = ("lead", "active", "paused", "completed")


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False, index=True)
    # assigned once at creation, never rewritten
    slug = Column(String(255), unique=True, nullable=False, index=True)
    business_type = Column(String(50), nullable=True)

    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)

    status = Column(String(20), nullable=False, default="lead")

    # logo / logo_key / brand_colors / photo_tags
    settings = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
