# portal/models/credential_account.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from portal.core.clock import utcnow
from portal.db.base import Base

CREDENTIAL_PROVIDER = "credential"


class CredentialAccount(Base):
    """Password-holding record for the credential sign-in method (1:1 with User)."""

    __tablename__ = "credential_accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    # credential providers key the account by email
    account_id = Column(String(255), nullable=False)
    provider_id = Column(String(50), nullable=False, default=CREDENTIAL_PROVIDER)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="credential_account")
