"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-256-bits-for-hs256-signing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")
os.environ.setdefault("MIN_PASSWORD_LENGTH", "8")
os.environ.setdefault("LOGIN_DELAY_MS", "0")
os.environ.setdefault("SINGLE_ACCOUNT", "true")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.models.user import User  # noqa: E402, F401
from app.services.accounts import AccountDirectory, get_account_directory  # noqa: E402
from app.services.password import PasswordHasher  # noqa: E402

TEST_PASSWORD = "Secret123!"


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


@pytest.fixture(name="hasher")
def hasher_fixture() -> PasswordHasher:
    """Cheapest bcrypt work factor, to keep the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture(name="directory")
def directory_fixture(hasher: PasswordHasher) -> AccountDirectory:
    return AccountDirectory(hasher, min_password_length=8, single_account=True)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Register the account and return its data with a valid token."""
    from app.services.jwt import get_jwt_service

    user = get_account_directory().register(db_session, "alice", TEST_PASSWORD, email="alice@example.com")
    token = get_jwt_service().create_token(user)

    return {
        "user_id": user.id,
        "user_name": user.user_name,
        "email": user.email,
        "password": TEST_PASSWORD,
        "token": token,
    }


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(test_user: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {test_user['token']}"}
