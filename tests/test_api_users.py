"""
API tests for the caller's profile, favorites and saved searches.
"""

import pytest
import uuid
from httpx import AsyncClient

from tests.conftest import API, PropertyFactory


class TestProfile:

    @pytest.mark.asyncio
    async def test_requires_token(self, async_client: AsyncClient):
        for path in ("/users/profile", "/users/properties", "/users/favorites", "/users/saved-searches"):
            response = await async_client.get(f"{API}{path}")
            assert response.status_code == 401, path

    @pytest.mark.asyncio
    async def test_get_profile(self, async_client: AsyncClient, test_agent, test_property, agent_headers):
        response = await async_client.get(f"{API}/users/profile", headers=agent_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "agent@example.com"
        assert data["role"] == "agent"
        assert "hashedPassword" not in data
        assert data["properties"][0]["id"] == str(test_property.id)
        assert set(data["properties"][0]) <= {"id", "title", "price", "location", "images"}
        assert data["favorites"] == []

    @pytest.mark.asyncio
    async def test_update_profile(self, async_client: AsyncClient, test_user, user_headers):
        response = await async_client.put(
            f"{API}/users/profile",
            json={"name": "New Name", "phone": "12345", "profileImage": "https://img.example.com/me.png",
                  "role": "admin", "email": "hijack@example.com"},
            headers=user_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "New Name"
        assert data["phone"] == "12345"
        assert data["profileImage"] == "https://img.example.com/me.png"
        assert data["role"] == "user"
        assert data["email"] == "user@example.com"

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, async_client: AsyncClient, user_headers):
        response = await async_client.put(f"{API}/users/profile", json={"name": "  "}, headers=user_headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "name"

    @pytest.mark.asyncio
    async def test_own_properties(
        self, async_client: AsyncClient, property_repository, test_agent, test_property, agent_headers
    ):
        await PropertyFactory.create_property(property_repository, test_agent.id, title="Second listing")

        response = await async_client.get(f"{API}/users/properties", headers=agent_headers)

        assert [p["title"] for p in response.json()["data"]] == ["Second listing", test_property.title]


class TestFavorites:

    @pytest.mark.asyncio
    async def test_add_list_remove(self, async_client: AsyncClient, test_property, user_headers):
        added = await async_client.post(f"{API}/users/favorites/{test_property.id}", headers=user_headers)
        assert added.status_code == 200
        assert added.json()["message"] == "Property added to favorites"

        listed = await async_client.get(f"{API}/users/favorites", headers=user_headers)
        assert [p["id"] for p in listed.json()["data"]] == [str(test_property.id)]

        removed = await async_client.delete(f"{API}/users/favorites/{test_property.id}", headers=user_headers)
        assert removed.status_code == 200
        assert removed.json()["message"] == "Property removed from favorites"

        listed = await async_client.get(f"{API}/users/favorites", headers=user_headers)
        assert listed.json()["data"] == []

    @pytest.mark.asyncio
    async def test_add_twice(self, async_client: AsyncClient, test_property, user_headers):
        await async_client.post(f"{API}/users/favorites/{test_property.id}", headers=user_headers)

        response = await async_client.post(f"{API}/users/favorites/{test_property.id}", headers=user_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Property already in favorites"

    @pytest.mark.asyncio
    async def test_remove_absent(self, async_client: AsyncClient, test_property, user_headers):
        response = await async_client.delete(f"{API}/users/favorites/{test_property.id}", headers=user_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Property not in favorites"

    @pytest.mark.asyncio
    async def test_add_missing_listing(self, async_client: AsyncClient, user_headers):
        response = await async_client.post(f"{API}/users/favorites/{uuid.uuid4()}", headers=user_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_deleted_listing_leaves_favorites(
        self, async_client: AsyncClient, test_property, user_headers, agent_headers
    ):
        await async_client.post(f"{API}/users/favorites/{test_property.id}", headers=user_headers)
        await async_client.delete(f"{API}/properties/{test_property.id}", headers=agent_headers)

        listed = await async_client.get(f"{API}/users/favorites", headers=user_headers)

        assert listed.json()["data"] == []


class TestSavedSearches:

    @pytest.mark.asyncio
    async def test_save_and_delete(self, async_client: AsyncClient, user_headers):
        created = await async_client.post(
            f"{API}/users/saved-searches",
            json={"query": "sea view", "filters": {"city": "Goa", "maxPrice": 20000000}},
            headers=user_headers,
        )
        assert created.status_code == 201
        search_id = created.json()["data"]["id"]

        listed = await async_client.get(f"{API}/users/saved-searches", headers=user_headers)
        assert listed.json()["data"][0]["filters"] == {"city": "Goa", "maxPrice": 20000000}

        deleted = await async_client.delete(f"{API}/users/saved-searches/{search_id}", headers=user_headers)
        assert deleted.status_code == 200

        listed = await async_client.get(f"{API}/users/saved-searches", headers=user_headers)
        assert listed.json()["data"] == []

    @pytest.mark.asyncio
    async def test_delete_other_users_search(self, async_client: AsyncClient, user_headers, agent_headers):
        created = await async_client.post(
            f"{API}/users/saved-searches", json={"query": "plot"}, headers=user_headers
        )
        search_id = created.json()["data"]["id"]

        response = await async_client.delete(f"{API}/users/saved-searches/{search_id}", headers=agent_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Saved search not found"
