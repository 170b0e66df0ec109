"""
API tests for registration, login and bearer-token resolution.
"""

import pytest
import uuid
from datetime import timedelta
from httpx import AsyncClient

from app.models.user import UserRole
from app.utils.auth import create_access_token
from tests.conftest import API


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_agent(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "name": "Asha Rao",
            "email": "Asha@Example.com",
            "password": "secret123",
            "phone": "+91 98450 00000",
            "role": "agent",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "asha@example.com"
        assert body["data"]["user"]["role"] == "agent"
        assert body["data"]["tokenType"] == "bearer"
        assert "password" not in body["data"]["user"]
        assert "hashedPassword" not in body["data"]["user"]

        me = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {body['data']['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Asha Rao"

    @pytest.mark.asyncio
    async def test_register_defaults_to_user_role(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "name": "Ravi", "email": "ravi@example.com", "password": "secret123",
        })

        assert response.status_code == 201
        assert response.json()["data"]["user"]["role"] == "user"

    @pytest.mark.asyncio
    async def test_register_as_admin_rejected(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "name": "Eve", "email": "eve@example.com", "password": "secret123", "role": "admin",
        })

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "role"
        assert "Role must be user or agent" in body["message"]

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, async_client: AsyncClient, test_user):
        response = await async_client.post(f"{API}/auth/register", json={
            "name": "Again", "email": "user@example.com", "password": "secret123",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"

    @pytest.mark.asyncio
    async def test_register_short_password(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "name": "Short", "email": "short@example.com", "password": "123",
        })

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "name": "Bad", "email": "not-an-email", "password": "secret123",
        })

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login(self, async_client: AsyncClient, test_user):
        response = await async_client.post(f"{API}/auth/login", json={
            "email": "USER@example.com", "password": "password123",
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(test_user.id)
        assert data["token"]

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, async_client: AsyncClient, test_user):
        response = await async_client.post(f"{API}/auth/login", json={
            "email": "user@example.com", "password": "wrong-password",
        })

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/login", json={
            "email": "nobody@example.com", "password": "password123",
        })

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestBearerToken:

    @pytest.mark.asyncio
    async def test_missing_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_malformed_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    @pytest.mark.asyncio
    async def test_expired_token(self, async_client: AsyncClient, test_user):
        token = create_access_token(
            test_user.id, test_user.email, test_user.role, expires_delta=timedelta(seconds=-1)
        )

        response = await async_client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(self, async_client: AsyncClient):
        token = create_access_token(uuid.uuid4(), "ghost@example.com", UserRole.ADMIN)

        response = await async_client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, user not found"

    @pytest.mark.asyncio
    async def test_role_read_from_store_not_token(self, async_client: AsyncClient, test_user):
        # A token minted with an admin claim does not grant admin rights to a user
        token = create_access_token(test_user.id, test_user.email, UserRole.ADMIN)

        response = await async_client.get(
            f"{API}/admin/dashboard", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 403
