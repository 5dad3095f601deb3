"""
Shared fixtures: a fresh application per test backed by its own in-memory
SQLite store, plus helpers to seed accounts and open sessions.
"""

import os

os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URI", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from hrdesk.core.config import Settings  # noqa: E402
from hrdesk.main import get_application  # noqa: E402
from hrdesk.models.user import User, UserRole  # noqa: E402
from hrdesk.services.accounts import AccountService  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ACCESS_TOKEN_SECRET="test-secret",
        DATABASE_URI="sqlite://",
        ENVIRONMENT="development",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return get_application(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app, client):
    session = app.state.database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def accounts(db) -> AccountService:
    return AccountService(db)


@pytest.fixture
def make_user(db):
    def _make_user(email, role=UserRole.EMPLOYEE, verified=False, fired=False, **fields):
        user = User(
            email=email,
            role=role.value,
            is_verified=verified,
            is_fired=fired,
            salary=fields.pop("salary", 0),
            extra=fields.pop("extra", {}),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def login(client):
    def _login(email):
        response = client.post("/jwt", json={"email": email})
        assert response.status_code == 200
        return response.json()["token"]

    return _login
