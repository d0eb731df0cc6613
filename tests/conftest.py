"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_PROVIDER", "console")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from blogspace.config import get_settings  # noqa: E402
from blogspace.database import Base, get_db  # noqa: E402
from blogspace.models.user import User  # noqa: E402
from blogspace.services.auth import AuthService  # noqa: E402
from blogspace.services.email import DeliveryError, EmailService  # noqa: E402
from blogspace.services.jwt import get_jwt_service  # noqa: E402


class RecordingEmailService(EmailService):
    """Keeps sent messages in memory; can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to_email: str, subject: str, body: str) -> None:
        if self.fail:
            raise DeliveryError("SMTP relay unavailable")
        self.sent.append({"to": to_email, "subject": subject, "body": body})

    def last_code(self) -> str:
        """Pull the reset code out of the most recent message."""
        body = self.sent[-1]["body"]
        line = next(line for line in body.splitlines() if "reset code is:" in line)
        return line.split(":", 1)[1].strip()


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="outbox")
def outbox_fixture(monkeypatch):
    """Replace the mail provider used by the API with an in-memory one."""
    outbox = RecordingEmailService()
    monkeypatch.setattr("blogspace.routers.auth.get_email_service", lambda: outbox)
    return outbox


@pytest.fixture(name="client")
def client_fixture(db_session: Session, outbox: RecordingEmailService):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from blogspace import bootstrap
    from blogspace.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Run the startup admin bootstrap against the test DB session
    bootstrap._session_factory = lambda: db_session

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()
    bootstrap._session_factory = None


def _make_user(db_session: Session, username: str, email: str, password: str = "password123") -> dict:
    result = AuthService().register(db_session, username, email, password)
    token = get_jwt_service().create_token(user_id=result.user_id, is_admin=result.is_admin)
    return {
        "user_id": result.user_id,
        "username": result.username,
        "email": result.email,
        "password": password,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a test user and return its data, token and auth headers."""
    return _make_user(db_session, "Test User", "test@example.com")


@pytest.fixture(name="other_user")
def other_user_fixture(db_session: Session):
    """A second, unrelated non-admin user."""
    return _make_user(db_session, "Other User", "other@example.com")


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session):
    """The bootstrap admin account with a token."""
    settings = get_settings()
    AuthService().ensure_admin(db_session, settings.ADMIN_USERNAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    admin = db_session.query(User).filter(User.email == settings.ADMIN_EMAIL).one()
    token = get_jwt_service().create_token(user_id=admin.id, is_admin=True)
    return {
        "user_id": admin.id,
        "email": admin.email,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }
