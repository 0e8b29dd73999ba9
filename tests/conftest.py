"""Pytest configuration and fixtures."""

import re
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from authcore.config import Settings, get_settings
from authcore.database import Base, build_engine, get_db
from authcore.errors import DeliveryError
from authcore.models.user import Role, User
from authcore.services.auth import AuthService

PUBLIC_BASE_URL = "https://auth.example.com"
RESET_LINK = re.compile(r"/api/v1/auth/reset-password/([0-9a-f]{64})")


class RecordingEmailService:
    """Stand-in for EmailService that keeps sent messages and can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    def send(self, recipient: str, subject: str, body: str) -> None:
        if self.fail:
            raise DeliveryError("SMTP server unavailable")
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})

    def last_reset_token(self) -> str:
        match = RESET_LINK.search(self.sent[-1]["body"])
        assert match, "no reset link in last email"
        return match.group(1)


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = build_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="email_service")
def email_service_fixture() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    return replace(get_settings(), PUBLIC_BASE_URL=PUBLIC_BASE_URL)


@pytest.fixture(name="client")
def client_fixture(db_session: Session, email_service: RecordingEmailService, settings: Settings):
    """Create a test client with overridden DB, settings and email dependencies and disabled rate limiting."""
    from authcore.rate_limit import limiter
    from authcore.services.email_service import get_email_service
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_settings] = lambda: settings
    limiter.enabled = False
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    limiter.enabled = True
    limiter.reset()
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a test user and return its data plus a bearer token."""
    from authcore.services.jwt import get_jwt_service

    result = AuthService().register(db_session, "test@example.com", "password123", "Test User")
    assert result.success

    token = get_jwt_service().create_token(result.user.id)

    return {
        "id": result.user.id,
        "email": result.user.email,
        "name": result.user.name,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session):
    """Create an admin user and return its data plus a bearer token."""
    from authcore.services.jwt import get_jwt_service

    result = AuthService().register(db_session, "admin@example.com", "adminpass123", "Admin")
    assert result.success
    user = db_session.get(User, result.user.id)
    user.role = Role.ADMIN.value
    db_session.commit()

    token = get_jwt_service().create_token(user.id)
    return {"id": user.id, "email": user.email, "token": token, "headers": {"Authorization": f"Bearer {token}"}}
