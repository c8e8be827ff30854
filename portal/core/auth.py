# portal/core/auth.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import func
from sqlalchemy.orm import Session

from portal.core.security import decode_access_token, verify_password
from portal.db.session import SessionLocal
from portal.models.user import User

# OAuth2 bearer scheme for Swagger "Authorize" button and DI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/login")

ADMIN_ROLES = {"admin"}


def get_db():
    """Yield a DB session and make sure it's closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Check credentials against the user's credential account.
    Unknown email, missing credential account and wrong password all return
    None so the caller cannot tell them apart.
    """
    user = (
        db.query(User)
        .filter(func.lower(User.email) == (email or "").strip().lower())
        .first()
    )
    if not user or not user.credential_account:
        return None

    if user.is_active is False:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="User is disabled"
        )

    if not verify_password(password, user.credential_account.password_hash):
        return None
    return user


def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Decode JWT and load the user from DB or return 401.
    Side-effect: stores user context on request.state for request logging.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    email = decode_access_token(token)
    if email is None:
        raise credentials_exception

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise credentials_exception

    if user.is_active is False:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="User is disabled"
        )

    request.state.user_id = user.id
    request.state.organization_id = user.organization_id
    return user


# ---------------------------
# Authorization context
# ---------------------------
@dataclass(frozen=True)
class AuthorizationContext:
    """Who is performing an administrative operation. Passed explicitly."""

    actor_id: Optional[int]
    role: str
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() in ADMIN_ROLES

    def require_admin(self) -> None:
        if not self.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden"
            )


def context_for(user: User) -> AuthorizationContext:
    return AuthorizationContext(actor_id=user.id, role=user.role, name=user.name)


def get_authorization_context(
    current_user: User = Depends(get_current_user),
) -> AuthorizationContext:
    return context_for(current_user)


def require_admin_context(
    ctx: AuthorizationContext = Depends(get_authorization_context),
) -> AuthorizationContext:
    ctx.require_admin()
    return ctx
