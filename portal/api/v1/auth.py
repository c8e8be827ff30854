# portal/api/v1/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from portal.core.auth import authenticate_user, get_current_user, get_db
from portal.core.security import create_access_token
from portal.models.user import User
from portal.schemas.user import TokenOut, UserOut

router = APIRouter()

log = logging.getLogger("portal.auth")


@router.post("/login", response_model=TokenOut)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    email = (form_data.username or "").strip()
    user = authenticate_user(db, email, form_data.password)
    if not user:
        log.info("failed sign-in for %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token({"sub": user.email})
    return TokenOut(access_token=token)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
