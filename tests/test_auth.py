# tests/test_auth.py

"""
Tests for authentication endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import JWTError, jwt

from core.config import settings
from core.local_storage import EMAIL_FOR_SIGN_IN
from dependencies.auth import decode_access_token
from models.enums import Role, UserStatus


def test_login_success(client: TestClient, make_user):
    user_id = make_user("admin@lucidence.io", Role.ADMIN)

    response = client.post(
        "/auth/login",
        json={"email": "Admin@Lucidence.io", "password": "Secret123!"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"].startswith(f"token-{user_id}")
    assert data["session_status"] == "AUTHENTICATED_WITH_PROFILE"
    assert data["profile"]["role"] == "ADMIN"
    assert data["redirect_to"] == "/admin/dashboard"
    assert data["message"] is None


def test_login_pending_account_gets_message(client: TestClient, make_user):
    make_user("pending@clinic.com", Role.CLIENT, UserStatus.pending)

    response = client.post("/auth/login", json={"email": "pending@clinic.com", "password": "Secret123!"})

    assert response.status_code == 200
    assert "pending approval" in response.json()["message"]


def test_login_invalid_credentials(client: TestClient, make_user):
    make_user("admin@lucidence.io", Role.ADMIN)

    response = client.post(
        "/auth/login",
        json={"email": "admin@lucidence.io", "password": "wrongpassword"},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Incorrect password.", "error": "auth_failure"}


def test_login_rate_limiting(client: TestClient):
    for _ in range(5):
        response = client.post("/auth/login", json={"email": "nobody@lucidence.io", "password": "x"})
        assert response.status_code == 400

    response = client.post("/auth/login", json={"email": "nobody@lucidence.io", "password": "x"})
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "900"


def test_password_reset_rate_limiting(client: TestClient, gateway):
    for _ in range(5):
        response = client.post("/auth/password-reset", json={"email": "test@lucidence.io"})
        assert response.status_code == 200

    response = client.post("/auth/password-reset", json={"email": "test@lucidence.io"})
    assert response.status_code == 429
    assert len(gateway.reset_emails) == 5


def test_me_without_token(client: TestClient):
    response = client.get("/auth/me")

    assert response.status_code == 200
    assert response.json()["status"] == "UNAUTHENTICATED"
    assert response.json()["dashboard"] == "/login"


def test_me_with_bad_token(client: TestClient):
    response = client.get("/auth/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_me_with_token(client: TestClient, auth_headers):
    response = client.get("/auth/me", headers=auth_headers(Role.STAFF))

    data = response.json()
    assert data["status"] == "AUTHENTICATED_WITH_PROFILE"
    assert data["profile"]["role"] == "STAFF"
    assert [item["path"] for item in data["navigation"]] == ["/staff/dashboard", "/staff/projects"]


def test_logout_revokes_token(client: TestClient, gateway, auth_headers):
    headers = auth_headers(Role.CLIENT)

    response = client.post("/auth/logout", headers=headers)

    assert response.status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 401


# -----------------------------------------------------
# Federated
# -----------------------------------------------------
def test_federated_start_returns_provider_url(client: TestClient):
    response = client.get("/auth/federated/start", params={"redirect_to": "http://localhost:5173/login"})
    assert response.status_code == 200
    assert response.json()["url"].startswith("https://accounts.example.com/")


def test_federated_first_sign_in_is_pending_lead(client: TestClient, gateway):
    user_id = gateway.add_account("someone@gmail.com", display_name="Some One")

    response = client.post(
        "/auth/federated/complete",
        json={"access_token": gateway.issue_token(user_id), "refresh_token": "r"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["profile"]["role"] == "LEAD"
    assert data["profile"]["status"] == "pending"
    assert data["redirect_to"] == "/unauthorized"


def test_federated_popup_closed(client: TestClient):
    response = client.post("/auth/federated/complete", json={"error_code": "access_denied"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Sign-in popup was closed before completing."


# -----------------------------------------------------
# Setup link (passwordless)
# -----------------------------------------------------
def test_setup_link_sets_cookie_and_completes(client: TestClient, gateway, make_user):
    make_user("client@clinic.com", Role.CLIENT)

    response = client.post("/auth/setup-link", json={"email": "client@clinic.com"})
    assert response.status_code == 200
    assert "client@clinic.com" in response.cookies.get(EMAIL_FOR_SIGN_IN)

    link = gateway.sign_in_links[-1]
    check = client.post("/auth/email-link/check", json={"url": link})
    assert check.json() == {"is_email_link": True}

    # The email comes from the cookie set above
    done = client.post("/auth/email-link/complete", json={"url": link})
    assert done.status_code == 200
    assert done.json()["profile"]["email"] == "client@clinic.com"
    assert client.cookies.get(EMAIL_FOR_SIGN_IN) is None


def test_email_link_complete_without_email(client: TestClient):
    response = client.post(
        "/auth/email-link/complete",
        json={"url": "http://localhost:5173/complete-signin?token_hash=abc&type=email"},
    )
    assert response.status_code == 400


# -----------------------------------------------------
# Local JWT verification
# -----------------------------------------------------
SECRET = "test-jwt-secret"


def make_jwt(**overrides):
    claims = {
        "sub": "user-1",
        "email": "user@lucidence.io",
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "user_metadata": {"full_name": "User One"},
    }
    claims.update(overrides)
    return jwt.encode(claims, SECRET, algorithm="HS256")


def test_decode_access_token():
    identity = decode_access_token(make_jwt(), SECRET)

    assert identity.id == "user-1"
    assert identity.email == "user@lucidence.io"
    assert identity.display_name == "User One"


@pytest.mark.parametrize(
    "token",
    [
        make_jwt(aud="anon"),
        make_jwt(exp=datetime.now(timezone.utc) - timedelta(minutes=1)),
        jwt.encode({"sub": "user-1", "aud": "authenticated"}, "other-secret", algorithm="HS256"),
    ],
)
def test_decode_access_token_rejects(token):
    with pytest.raises(JWTError):
        decode_access_token(token, SECRET)


def test_bearer_verified_locally_when_secret_set(client: TestClient, monkeypatch, make_user):
    user_id = make_user("admin@lucidence.io", Role.ADMIN)
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", SECRET)

    token = make_jwt(sub=user_id, email="admin@lucidence.io")
    response = client.get("/admin/dashboard", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
