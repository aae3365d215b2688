"""
Contract tests for authentication API endpoints.

Tests verify the API contract for authentication endpoints:
- Request/response schemas (camelCase field names)
- HTTP status codes
- Bearer token handling
- Error responses ({"detail": ...})

The application runs against the in-memory backend with the demo accounts
seeded.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from learnsphere.src.main import create_app

DEMO_USER = {"email": "user@learnsphere.dev", "password": "demo123"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login_token(client, email: str, password: str) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["token"]


# ============================================================================
# REGISTRATION
# ============================================================================


class TestRegisterContract:
    def test_register_returns_token(self, client, user_credentials):
        response = client.post("/api/auth/register", json=user_credentials)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["token"].count(".") == 2

    def test_register_twice(self, client, user_credentials):
        first = client.post("/api/auth/register", json=user_credentials)
        second = client.post("/api/auth/register", json=user_credentials)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json() == {"detail": "User already exists"}

    def test_email_is_case_insensitive(self, client, user_credentials):
        client.post("/api/auth/register", json=user_credentials)
        shouted = {**user_credentials, "email": user_credentials["email"].upper()}

        assert client.post("/api/auth/register", json=shouted).status_code == 409

    @pytest.mark.parametrize("override", [
        {"email": "not-an-email"},
        {"password": "12345"},
        {"name": ""},
        {"name": "   "},
    ])
    def test_invalid_body(self, client, user_credentials, override):
        response = client.post("/api/auth/register", json={**user_credentials, **override})

        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)

    def test_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "a@learnsphere.dev"})

        assert response.status_code == 422


# ============================================================================
# LOGIN
# ============================================================================


class TestLoginContract:
    def test_demo_user_login(self, client):
        response = client.post("/api/auth/login", json=DEMO_USER)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert body["user"]["email"] == "user@learnsphere.dev"
        assert body["user"]["role"] == "user"
        assert {"id", "name", "email", "role", "preferences"} <= set(body["user"])
        assert "password_hash" not in body["user"]
        assert "topicsOfInterest" in body["user"]["preferences"]

    def test_registered_user_login(self, client, user_credentials):
        client.post("/api/auth/register", json=user_credentials)

        response = client.post("/api/auth/login", json={
            "email": user_credentials["email"],
            "password": user_credentials["password"],
        })

        assert response.status_code == 200

    def test_wrong_password(self, client):
        response = client.post("/api/auth/login", json={**DEMO_USER, "password": "wrong"})

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid credentials"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@learnsphere.dev", "password": "x"})

        assert response.status_code == 401


# ============================================================================
# TOKENS AND PROFILE
# ============================================================================


class TestTokenContract:
    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"detail": "No token, authorization denied"}

    def test_malformed_token(self, client):
        response = client.get("/api/auth/me", headers=bearer("garbage"))

        assert response.status_code == 401
        assert response.json() == {"detail": "Token is not valid"}

    def test_token_signed_with_other_key(self, client):
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {
                "sub": "someone",
                "role": "admin",
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
                "iss": "learnsphere-api",
            },
            "a-completely-different-signing-key-0123456789",
            algorithm="HS256",
        )

        assert client.get("/api/auth/me", headers=bearer(forged)).status_code == 401

    def test_expired_token(self, client, auth_headers):
        auth_service = client.app.state.auth_service
        expired = auth_service.create_access_token("someone", "user", expires_delta=timedelta(seconds=-5))

        response = client.get("/api/auth/me", headers=bearer(expired))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token is not valid"

    def test_deleted_user(self, client, auth_headers):
        client.app.state.repositories.store.users.clear()

        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 401
        assert response.json() == {"detail": "User not found"}


class TestProfileContract:
    def test_me(self, client, auth_headers, user_credentials):
        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == user_credentials["email"].lower()
        assert body["name"] == user_credentials["name"]
        assert "password_hash" not in body
        assert body["preferences"]["level"] == "intermediate"

    def test_update_profile(self, client, auth_headers):
        response = client.put("/api/auth/profile", headers=auth_headers, json={
            "name": "Renamed Learner",
            "preferences": {"level": "advanced", "topicsOfInterest": ["Physics"]},
        })

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["name"] == "Renamed Learner"
        assert user["preferences"]["level"] == "advanced"
        assert user["preferences"]["topicsOfInterest"] == ["Physics"]

    def test_partial_update_keeps_other_fields(self, client, auth_headers, user_credentials):
        response = client.put("/api/auth/profile", headers=auth_headers, json={
            "preferences": {"level": "beginner"},
        })

        assert response.json()["user"]["name"] == user_credentials["name"]


# ============================================================================
# PASSWORDS
# ============================================================================


class TestPasswordContract:
    def test_change_password(self, client, auth_headers, user_credentials):
        response = client.put("/api/auth/password", headers=auth_headers, json={
            "currentPassword": user_credentials["password"],
            "newPassword": "changed123",
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Password updated successfully"}
        login_token(client, user_credentials["email"], "changed123")

    def test_change_password_wrong_current(self, client, auth_headers):
        response = client.put("/api/auth/password", headers=auth_headers, json={
            "currentPassword": "not-it",
            "newPassword": "changed123",
        })

        assert response.status_code == 401
        assert response.json() == {"detail": "Current password is incorrect"}

    def test_forgot_and_reset_password(self, client, auth_headers, user_credentials):
        response = client.post("/api/auth/forgot-password", json={"email": user_credentials["email"]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Password reset token generated"
        token = body["resetToken"]
        assert body["resetUrl"].endswith(f"/api/auth/reset-password/{token}")

        reset = client.put(f"/api/auth/reset-password/{token}", json={"password": "fresh1234"})

        assert reset.status_code == 200
        assert reset.json()["token"]
        login_token(client, user_credentials["email"], "fresh1234")

    def test_reset_with_unknown_token(self, client):
        response = client.put("/api/auth/reset-password/deadbeef", json={"password": "fresh1234"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid or expired reset token"}

    def test_forgot_password_unknown_email(self, client):
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@learnsphere.dev"})

        assert response.status_code == 404
        assert response.json() == {"detail": "User not found"}

    def test_production_does_not_echo_token(self, settings):
        production = settings.model_copy(update={"environment": "production"})

        with TestClient(create_app(production)) as client:
            response = client.post("/api/auth/forgot-password", json={"email": DEMO_USER["email"]})

        assert response.status_code == 200
        assert "resetToken" not in response.json()
        assert "resetUrl" not in response.json()

    def test_configured_minimum_length(self, settings):
        strict = settings.model_copy(update={"password_min_length": 10})

        with TestClient(create_app(strict)) as client:
            short = client.post("/api/auth/register", json={
                "name": "Learner", "email": "learner@learnsphere.dev", "password": "secret123",
            })
            headers = bearer(login_token(client, DEMO_USER["email"], DEMO_USER["password"]))
            change = client.put("/api/auth/password", headers=headers, json={
                "currentPassword": DEMO_USER["password"], "newPassword": "short123",
            })

        assert short.status_code == 422
        assert short.json() == {"detail": "Password must be at least 10 characters"}
        assert change.status_code == 422


# ============================================================================
# RATE LIMITING
# ============================================================================


class TestRateLimitContract:
    def test_login_is_rate_limited(self, settings):
        limited = settings.model_copy(update={"rate_limit_enabled": True, "rate_limit_auth": "2/minute"})

        with TestClient(create_app(limited)) as client:
            statuses = [
                client.post("/api/auth/login", json=DEMO_USER).status_code
                for _ in range(3)
            ]

        assert statuses == [200, 200, 429]
