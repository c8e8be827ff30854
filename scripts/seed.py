#!/usr/bin/env python3
"""
Minimal seed:
- Ensures an admin user with a credential account exists.
- Safe to run multiple times (idempotent).
"""
import logging
import os

from sqlalchemy.orm import Session

from portal.core.security import get_password_hash
from portal.db.session import SessionLocal
from portal.models.credential_account import CredentialAccount
from portal.models.user import User

log = logging.getLogger("portal.seed")


def ensure_admin(db: Session, email: str, password: str) -> User:
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(
            email=email,
            name="Admin",
            role="admin",
            account_type="team_lead",
            email_verified=True,
        )
        db.add(user)
        db.flush()
    else:
        user.role = "admin"
        user.is_active = True

    if user.credential_account is None:
        db.add(
            CredentialAccount(
                user_id=user.id,
                account_id=email,
                password_hash=get_password_hash(password),
            )
        )

    db.commit()
    db.refresh(user)
    return user


def main():
    logging.basicConfig(level=logging.INFO)
    email = os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com")
    password = os.environ.get("SEED_ADMIN_PASSWORD", "ChangeMe123!")

    db = SessionLocal()
    try:
        u = ensure_admin(db, email, password)
        log.info("admin ensured -> %s (id=%s)", u.email, u.id)
    finally:
        db.close()


if __name__ == "__main__":
    main()
