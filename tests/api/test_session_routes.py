"""
API tests for session endpoints.
Tests email sign-up/sign-in, Apple sign-in, profile updates and sign-out.
"""

import pytest
from unittest.mock import AsyncMock

from fastapi import status


class TestHealthEndpoints:
    """Tests for /api/health."""

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/api/health/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_ready(self, test_client):
        response = await test_client.get("/api/health/ready")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["checks"]["storage"] == "ready"


class TestGetSession:
    """Tests for GET /api/session."""

    @pytest.mark.asyncio
    async def test_signed_out(self, test_client):
        response = await test_client.get("/api/session")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user"] is None
        assert data["publicUserId"] is None
        assert data["isLoading"] is False

    @pytest.mark.asyncio
    async def test_signed_in(self, signed_in_client):
        response = await signed_in_client.get("/api/session")

        data = response.json()
        assert data["user"]["email"] == "ann@example.com"
        assert data["user"]["displayName"] == "Ann"
        assert data["publicUserId"].startswith("CHK-")


class TestSignUpEndpoint:
    """Tests for POST /api/session/sign-up."""

    @pytest.mark.asyncio
    async def test_sign_up_success(self, test_client):
        response = await test_client.post(
            "/api/session/sign-up",
            json={"email": " New@Example.com ", "password": "pass1"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        user = response.json()["user"]
        assert user["email"] == "new@example.com"
        assert user["displayName"] == "new"
        assert user["id"].startswith("u_")

    @pytest.mark.asyncio
    async def test_sign_up_duplicate_email(self, signed_in_client, test_user_data):
        response = await signed_in_client.post(
            "/api/session/sign-up",
            json={"email": "ann@example.com", "password": "other1"},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "This email address is already registered."

    @pytest.mark.asyncio
    async def test_sign_up_short_password(self, test_client):
        response = await test_client.post(
            "/api/session/sign-up",
            json={"email": "a@example.com", "password": "abc"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "The email address or password is invalid."

    @pytest.mark.asyncio
    async def test_sign_up_missing_password(self, test_client):
        response = await test_client.post(
            "/api/session/sign-up",
            json={"email": "a@example.com"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestSignInEndpoint:
    """Tests for POST /api/session/sign-in."""

    @pytest.mark.asyncio
    async def test_sign_in_success(self, signed_in_client, test_user_data):
        await signed_in_client.post("/api/session/sign-out")

        response = await signed_in_client.post(
            "/api/session/sign-in",
            json={"email": "ANN@example.com", "password": test_user_data["password"]},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["displayName"] == "Ann"

    @pytest.mark.asyncio
    async def test_sign_in_unknown_account(self, test_client):
        response = await test_client.post(
            "/api/session/sign-in",
            json={"email": "nobody@example.com", "password": "pass1"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Account not found. Please create a new account."

    @pytest.mark.asyncio
    async def test_sign_in_wrong_password(self, signed_in_client):
        await signed_in_client.post("/api/session/sign-out")

        response = await signed_in_client.post(
            "/api/session/sign-in",
            json={"email": "ann@example.com", "password": "wrong1"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

        session = await signed_in_client.get("/api/session")
        assert session.json()["user"] is None
        assert session.json()["errorMessage"] == "The email address or password is invalid."


class TestAppleEndpoints:
    """Tests for /api/session/apple."""

    @pytest.mark.asyncio
    async def test_prepare(self, test_client):
        response = await test_client.post("/api/session/apple/prepare")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["nonce"]) == 64
        assert data["scopes"] == ["full_name", "email"]

    @pytest.mark.asyncio
    async def test_apple_sign_in(self, test_client):
        await test_client.post("/api/session/apple/prepare")

        response = await test_client.post(
            "/api/session/apple",
            json={
                "subject": "sub1",
                "email": "kei@privaterelay.test",
                "givenName": "Kei",
                "familyName": "Sato",
                "identityToken": "header.payload.signature",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        user = response.json()["user"]
        assert user["id"].startswith("a_")
        assert user["email"] == "kei@privaterelay.test"
        assert user["displayName"] == "Kei Sato"

    @pytest.mark.asyncio
    async def test_apple_sign_in_without_prepare(self, test_client):
        response = await test_client.post(
            "/api/session/apple",
            json={"subject": "sub1", "identityToken": "header.payload.signature"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_apple_sign_in_without_token(self, test_client):
        await test_client.post("/api/session/apple/prepare")

        response = await test_client.post("/api/session/apple", json={"subject": "sub1"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestProfileAndSignOut:
    """Tests for PATCH /api/session/profile and POST /api/session/sign-out."""

    @pytest.mark.asyncio
    async def test_update_display_name(self, signed_in_client):
        response = await signed_in_client.patch(
            "/api/session/profile",
            json={"displayName": "  Annie  "},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["displayName"] == "Annie"

    @pytest.mark.asyncio
    async def test_update_display_name_signed_out(self, test_client):
        response = await test_client.patch(
            "/api/session/profile",
            json={"displayName": "Annie"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_sign_out(self, signed_in_client):
        response = await signed_in_client.post("/api/session/sign-out")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"] is None

        stays = await signed_in_client.get("/api/stays")
        assert stays.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_storage_failure_returns_user_message(self, signed_in_client, container):
        container.auth.sign_out = AsyncMock(side_effect=RuntimeError("database is locked"))

        response = await signed_in_client.post("/api/session/sign-out")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "An error occurred while processing your request."
