"""
Shared pytest fixtures.

- credential services with fixed secrets
- an in-memory stand-in for the users table
- a FastAPI TestClient wired to both (no Postgres needed)
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from knockturn.auth import auth_db
from knockturn.auth.auth_errors import UserExistsError
from knockturn.auth.credential_service import CredentialService


TEST_SECRET = "test-secret-for-pytest"


@pytest.fixture
def credentials():
    """CredentialService with the production cost factor."""
    return CredentialService(TEST_SECRET)


@pytest.fixture
def fast_credentials():
    """Low bcrypt cost for tests that hash a lot."""
    return CredentialService(TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture
def fake_users(monkeypatch):
    """Replace the psycopg2 users table with a dict keyed by username."""
    users = {}

    def get_user_by_username(username):
        row = users.get(username.strip())
        return dict(row) if row else None

    def get_user_by_id(user_id):
        for row in users.values():
            if row["id"] == user_id:
                return dict(row)
        return None

    def create_user(username, hashed_password, role=None, employee_id=None):
        username = username.strip()
        if username in users:
            raise UserExistsError("Username already exists")
        user_id = str(uuid.uuid4())
        users[username] = {
            "id": user_id,
            "username": username,
            "password": hashed_password,
            "employee_id": employee_id,
            "role": role or "EMPLOYEE",
        }
        return user_id

    monkeypatch.setattr(auth_db, "get_user_by_username", get_user_by_username)
    monkeypatch.setattr(auth_db, "get_user_by_id", get_user_by_id)
    monkeypatch.setattr(auth_db, "username_exists", lambda name: get_user_by_username(name) is not None)
    monkeypatch.setattr(auth_db, "create_user", create_user)
    return users


@pytest.fixture
def client(fake_users):
    """
    TestClient for knockturn.main.app.

    Not used as a context manager, so the startup hook (which needs
    Postgres) does not run; credentials are configured directly.
    """
    from knockturn.main import app, configure_credentials

    configure_credentials({"JWT_SECRET": TEST_SECRET, "BCRYPT_ROUNDS": "4"})
    return TestClient(app)
