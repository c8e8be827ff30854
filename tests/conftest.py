"""
Test configuration and fixtures.

- fresh SQLite file per test (savepoints + foreign keys enabled)
- HTTPX AsyncClient against the ASGI app with get_db / get_notifier overridden
- RecordingNotifier instead of SMTP
"""
import os
import tempfile
from typing import AsyncGenerator, Callable, Generator

# must happen before portal.* is imported
os.environ["ENABLE_CREATE_ALL"] = "0"
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'portal-test.db')}"
)
os.environ.setdefault("APP_BASE_URL", "http://portal.test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session, sessionmaker

from portal.core.auth import get_db
from portal.core.security import create_access_token, get_password_hash
from portal.db.base import Base
from portal.db.session import make_engine
from portal.main import app
from portal.models.credential_account import CredentialAccount
from portal.models.invitation import Invitation
from portal.models.user import User
from portal.services.notifications import RecordingNotifier, get_notifier
from portal.services.tokens import issue_token

ADMIN_PASSWORD = "admin-password-1"


@pytest.fixture(scope="function")
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'portal.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture(scope="function")
def db(session_factory) -> Generator[Session, None, None]:
    """
    Session for arranging data. Objects stay readable after commit, so the
    session does not hold a read transaction open while the API writes.
    """
    session = session_factory(expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


def _make_user(db: Session, email: str, role: str, password: str) -> User:
    user = User(
        email=email,
        name=email.split("@")[0].title(),
        role=role,
        account_type="team_lead",
        email_verified=True,
    )
    db.add(user)
    db.flush()
    db.add(
        CredentialAccount(
            user_id=user.id,
            account_id=email,
            password_hash=get_password_hash(password),
        )
    )
    db.commit()
    return user


@pytest.fixture(scope="function")
def admin_user(db: Session) -> User:
    return _make_user(db, "admin@soundsgood.test", "admin", ADMIN_PASSWORD)


@pytest.fixture(scope="function")
def client_user(db: Session) -> User:
    return _make_user(db, "existing@client.test", "client", "client-password-1")


@pytest.fixture(scope="function")
def admin_headers(admin_user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': admin_user.email})}"}


@pytest.fixture(scope="function")
def client_headers(client_user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': client_user.email})}"}


@pytest.fixture(scope="function")
def make_invitation(db: Session) -> Callable[..., Invitation]:
    """Insert a pending invitation straight into the database."""

    def _make(email: str = "bob@bobsgym.test", now=None, **fields) -> Invitation:
        issued = issue_token(now)
        values = {
            "email": email,
            "token": issued.token,
            "expires_at": issued.expires_at,
            "status": "pending",
            "role": "client",
            "account_type": "team_lead",
        }
        values.update(fields)
        invitation = Invitation(**values)
        db.add(invitation)
        db.commit()
        return invitation

    return _make


@pytest.fixture(scope="function")
async def client(
    session_factory: sessionmaker, notifier: RecordingNotifier
) -> AsyncGenerator[AsyncClient, None]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
