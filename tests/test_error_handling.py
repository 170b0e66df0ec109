"""
Tests for the error envelope, validation field naming and request logging headers.
"""

import json
import pytest
from httpx import AsyncClient

from app.main import app
from app.services.error_handler import ErrorHandlerService
from app.utils.dependencies import get_property_service
from app.utils.exceptions import (
    StoreError,
    ValidationError,
    PropertyNotFoundError,
    PropertyOwnershipError,
)
from tests.conftest import API


class FailingPropertyService:
    """Stands in for PropertyService when the store is unavailable."""

    async def list_properties(self, *args, **kwargs):
        raise RuntimeError("connection refused")


class TestFieldNames:

    def test_body_prefix_dropped(self):
        assert ErrorHandlerService.field_name(("body", "price")) == "price"

    def test_nested_path_dotted(self):
        assert ErrorHandlerService.field_name(("body", "area", "value")) == "area.value"

    def test_list_index_kept(self):
        assert ErrorHandlerService.field_name(("body", "images", 0, "url")) == "images.0.url"

    def test_query_prefix_dropped(self):
        assert ErrorHandlerService.field_name(("query", "minPrice")) == "minPrice"

    def test_whole_body(self):
        assert ErrorHandlerService.field_name(("body",)) == "body"


class TestEnvelope:

    def test_absent_members_omitted(self):
        assert ErrorHandlerService.format_error_response("Property not found") == {
            "success": False,
            "message": "Property not found",
        }

    def test_not_found(self):
        response = ErrorHandlerService.handle_api_exception(PropertyNotFoundError("abc"))

        assert response.status_code == 404
        assert json.loads(response.body) == {"success": False, "message": "Property not found"}

    def test_forbidden(self):
        response = ErrorHandlerService.handle_api_exception(PropertyOwnershipError("delete"))

        assert response.status_code == 403
        assert json.loads(response.body)["message"] == "Not authorized to delete this property"

    def test_field_errors_listed(self):
        error = ValidationError.for_field("sort", "Cannot sort by 'owner'")

        response = ErrorHandlerService.handle_api_exception(error)

        body = json.loads(response.body)
        assert response.status_code == 400
        assert body["errors"] == [{"field": "sort", "message": "Cannot sort by 'owner'", "type": "value_error"}]

    def test_store_error_exposes_raw_text(self):
        response = ErrorHandlerService.handle_api_exception(StoreError("Error fetching properties", "disk full"))

        assert response.status_code == 500
        assert json.loads(response.body) == {
            "success": False,
            "message": "Error fetching properties",
            "error": "disk full",
        }

    def test_store_error_redacted(self, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "expose_error_details", False)

        response = ErrorHandlerService.handle_api_exception(StoreError("Error fetching properties", "disk full"))

        assert "error" not in json.loads(response.body)

    def test_unexpected_error(self):
        response = ErrorHandlerService.handle_unexpected_error(KeyError("owner"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["success"] is False
        assert body["message"] == "Server error"


class TestErrorResponsesOverHttp:

    @pytest.mark.asyncio
    async def test_unknown_route(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    @pytest.mark.asyncio
    async def test_store_failure_names_operation(self, async_client: AsyncClient):
        app.dependency_overrides[get_property_service] = lambda: FailingPropertyService()

        response = await async_client.get(f"{API}/properties")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Error fetching properties",
            "error": "connection refused",
        }

    @pytest.mark.asyncio
    async def test_malformed_json(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            f"{API}/properties",
            content=b"{not json",
            headers={**agent_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/properties", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert "X-Processing-Time" in response.headers

    @pytest.mark.asyncio
    async def test_request_id_generated(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert len(response.headers["X-Request-ID"]) == 8
        assert response.json()["data"]["apiPrefix"] == "/api"

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["database"] == "connected"
