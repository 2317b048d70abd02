import uuid

import pytest
from fastapi.testclient import TestClient

from tasknest.config import Settings
from tasknest.main import create_app

VALID_PASSWORD = "SecurePass123!"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        environment="test",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key="test-secret-key-that-is-long-enough-0123456789",
        log_level="WARNING",
    )


@pytest.fixture
def password():
    """A password that satisfies the registration rules."""
    return VALID_PASSWORD


@pytest.fixture
def app(settings):
    app = create_app(settings)
    yield app
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    """Register a fresh user; returns (user, auth headers)."""

    def _register(name: str = "Test User", email: str = None):
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        r = client.post("/auth/register", json={"name": name, "email": email, "password": VALID_PASSWORD})
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def befriend(client):
    """Send and accept a friend request between two registered users."""

    def _befriend(a, a_headers, b, b_headers):
        r = client.post("/friends/requests", json={"recipientId": b["id"]}, headers=a_headers)
        assert r.status_code == 201, r.text
        request_id = r.json()["data"]["id"]
        r = client.put(f"/friends/requests/{request_id}/accept", headers=b_headers)
        assert r.status_code == 200, r.text
        return request_id

    return _befriend
