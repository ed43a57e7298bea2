"""
Tests for authentication endpoints.

Tests:
- Signup with and without a full name
- Duplicate email
- Login with good and bad credentials
- /auth/me with missing, malformed and expired tokens
- Request validation
"""

from datetime import timedelta

import pytest

from conftest import signup_via_api
from core.security import create_access_token, verify_jwt_token


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_returns_token_and_profile(self, client):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "jane@example.com", "password": "secret123", "full_name": "Jane Doe"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        assert data["profile"]["full_name"] == "Jane Doe"
        assert data["profile"]["role"] == "job_seeker"
        assert data["profile"]["id"] == data["identity_id"]
        assert verify_jwt_token(data["access_token"])["sub"] == data["identity_id"]

    @pytest.mark.asyncio
    async def test_blank_name_falls_back_to_user(self, client):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "blank@example.com", "password": "secret123", "full_name": "   "},
        )

        assert response.status_code == 201
        assert response.json()["profile"]["full_name"] == "User"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client):
        await signup_via_api(client, "taken@example.com")

        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "TAKEN@example.com", "password": "secret123"},
        )

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "EMAIL_TAKEN"
        assert error["path"] == "/api/v1/auth/signup"
        assert error["method"] == "POST"

    @pytest.mark.asyncio
    async def test_invalid_payload_is_rejected(self, client):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "not-an-email", "password": "123"},
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        fields = {d["field"] for d in error["details"]}
        assert "body.email" in fields
        assert "body.password" in fields


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_issues_token(self, client):
        signed_up = await signup_via_api(client, "login@example.com")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "login@example.com", "password": "secret123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["identity_id"] == signed_up["body"]["identity_id"]
        assert data["access_token"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [
        ("login@example.com", "wrong-password"),
        ("nobody@example.com", "secret123"),
    ])
    async def test_bad_credentials_are_indistinguishable(self, client, email, password):
        await signup_via_api(client, "login@example.com")

        response = await client.post(
            "/api/v1/auth/login", json={"email": email, "password": password}
        )

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "INVALID_CREDENTIALS"
        assert error["message"] == "Invalid email or password"


class TestMe:

    @pytest.mark.asyncio
    async def test_me_returns_identity_and_profile(self, client):
        signed_up = await signup_via_api(client, "me@example.com", full_name="Me Myself")

        response = await client.get("/api/v1/auth/me", headers=signed_up["headers"])

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "me@example.com"
        assert data["profile"]["full_name"] == "Me Myself"

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token_is_rejected(self, client):
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(self, client):
        signed_up = await signup_via_api(client, "expired@example.com")
        token = create_access_token(
            signed_up["body"]["identity_id"],
            "expired@example.com",
            expires_delta=timedelta(seconds=-10),
        )

        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"
