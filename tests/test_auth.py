import dataclasses
import uuid

from tasknest.models.user import User
from tasknest.services.identity import create_identity, link_oauth_identity
from tasknest.utils.auth import create_token


def _email():
    return f"test_{uuid.uuid4().hex}@example.com"


def test_register_and_login_success(client, password):
    email = _email()

    r = client.post("/auth/register", json={"name": "Ada", "email": email, "password": password})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert "timestamp" in body
    assert body["data"]["user"]["email"] == email
    assert body["data"]["user"]["name"] == "Ada"
    assert "password" not in body["data"]["user"]
    assert body["data"]["token"]

    r2 = client.post("/auth/login", json={"email": email, "password": password})
    assert r2.status_code == 200
    token = r2.json()["data"]["token"]

    r3 = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r3.status_code == 200
    assert r3.json()["data"]["user"]["id"] == body["data"]["user"]["id"]


def test_register_duplicate_email_is_case_insensitive(client, password):
    email = _email()
    r = client.post("/auth/register", json={"name": "Ada", "email": email, "password": password})
    assert r.status_code == 201

    r = client.post("/auth/register", json={"name": "Ada", "email": email.upper(), "password": password})
    assert r.status_code == 409
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "DUPLICATE_ENTRY"
    assert "already exists" in body["error"]


def test_login_accepts_any_email_case(client, password):
    email = _email()
    client.post("/auth/register", json={"name": "Ada", "email": email, "password": password})
    r = client.post("/auth/login", json={"email": email.upper(), "password": password})
    assert r.status_code == 200


def test_register_password_too_long(client):
    r = client.post("/auth/register", json={"name": "Ada", "email": _email(), "password": "Aa1" + "a" * 100})
    assert r.status_code == 400
    text = r.text.lower()
    assert "password" in text and "too long" in text


def test_register_weak_password_reports_field(client):
    r = client.post("/auth/register", json={"name": "Ada", "email": _email(), "password": "alllower1"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"]["password"] == ["Password must contain at least one uppercase letter"]


def test_register_requires_fields(client, password):
    r = client.post("/auth/register", json={"password": password})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert "email" in errors and "name" in errors

    r = client.post("/auth/register", json={"name": "Ada", "email": "not_an_email", "password": password})
    assert r.status_code == 400
    assert "email" in r.json()["errors"]


def test_login_wrong_password(client, password):
    email = _email()
    client.post("/auth/register", json={"name": "Ada", "email": email, "password": password})
    r = client.post("/auth/login", json={"email": email, "password": "WrongPass123!"})
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid email or password"


def test_login_with_too_long_password_fails(client, password):
    email = _email()
    client.post("/auth/register", json={"name": "Ada", "email": email, "password": password})
    r = client.post("/auth/login", json={"email": email, "password": "a" * 100})
    assert r.status_code == 401


def test_login_unknown_user(client, password):
    r = client.post("/auth/login", json={"email": _email(), "password": password})
    assert r.status_code == 401


def test_logout(client, register):
    _, headers = register()
    r = client.post("/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Logout successful"


def test_google_login_not_configured(client):
    r = client.get("/auth/google", follow_redirects=False)
    assert r.status_code == 501
    assert "not configured" in r.json()["error"]


def test_google_login_redirects_when_configured(settings):
    from fastapi.testclient import TestClient
    from tasknest.main import create_app

    configured = dataclasses.replace(settings, google_client_id="cid", google_client_secret="secret")
    app = create_app(configured)
    try:
        r = TestClient(app).get("/auth/google", follow_redirects=False)
        assert r.status_code == 307
        assert r.headers["location"].startswith("https://accounts.google.com/")
        assert "client_id=cid" in r.headers["location"]
    finally:
        app.state.engine.dispose()


def test_link_oauth_identity_creates_then_reuses(db):
    user = link_oauth_identity(db, "g-123", "Oauth@Example.com", "O Auth")
    assert user.email == "oauth@example.com"
    assert user.google_id == "g-123"

    again = link_oauth_identity(db, "g-123", "oauth@example.com", "Other Name")
    assert again.id == user.id
    assert db.query(User).count() == 1


def test_link_oauth_identity_links_existing_email(db, client, password):
    existing = create_identity(db, "Ada", "ada@example.com", password)
    linked = link_oauth_identity(db, "g-999", "ADA@example.com", "Ada L")
    assert linked.id == existing.id
    assert linked.google_id == "g-999"

    # password login keeps working for the linked account
    r = client.post("/auth/login", json={"email": "ada@example.com", "password": password})
    assert r.status_code == 200


def test_oauth_only_identity_cannot_password_login(db, client, password):
    link_oauth_identity(db, "g-1", "nopass@example.com", "No Pass")
    r = client.post("/auth/login", json={"email": "nopass@example.com", "password": password})
    assert r.status_code == 401


class TestPrincipalResolver:
    def test_missing_header(self, client):
        r = client.get("/auth/me")
        assert r.status_code == 401
        assert r.json()["code"] == "UNAUTHORIZED"

    def test_not_bearer(self, client):
        r = client.get("/auth/me", headers={"Authorization": "Basic abc"})
        assert r.status_code == 401

    def test_malformed_token(self, client):
        r = client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid token"

    def test_wrong_signature(self, client, register, settings):
        user, _ = register()
        other = dataclasses.replace(settings, secret_key="another-secret-key-of-sufficient-length")
        token = create_token({"sub": user["id"]}, other)
        r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid token"

    def test_expired_token(self, client, register, settings):
        user, _ = register()
        expired = dataclasses.replace(settings, access_token_expire_minutes=-1)
        token = create_token({"sub": user["id"]}, expired)
        r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert "expired" in r.json()["error"].lower()

    def test_deleted_identity(self, client, register, db):
        user, headers = register()
        db.query(User).filter(User.id == user["id"]).delete()
        db.commit()
        r = client.get("/auth/me", headers=headers)
        assert r.status_code == 401
