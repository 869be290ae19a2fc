"""Unit tests for the users listing route.

The app is exercised over ASGI with the user service overridden to read
from the in-memory ranked store; no database is involved.
"""

import base64
import json
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.dependencies import get_user_service
from app.core.errors import PaginationInvariantError, StoreUnavailableError
from app.domain.models.user import UserFilter
from app.main import create_app
from app.persistence.base import CURSOR_VERSION
from app.services.user_service import UserService

USERS_URL = "/api/v1/users"


@pytest.fixture
def app(mock_session, settings, user_store):
    application = create_app()

    def override_user_service() -> UserService:
        service = UserService(mock_session, settings)
        service.assembler._fetch_rows = user_store.list_ranked
        return service

    application.dependency_overrides[get_user_service] = override_user_service
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestListUsers:
    """Test GET /api/v1/users."""

    @pytest.mark.asyncio
    async def test_first_page(self, client, user_store):
        """Test the first page uses camelCase keys and the default page size."""
        response = await client.get(USERS_URL)

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"items", "cursor", "hasPrevious", "hasMore"}
        assert body["hasPrevious"] is False
        assert body["hasMore"] is True
        assert body["cursor"]
        assert len(body["items"]) == 10
        top = user_store.ranked(UserFilter())[0]
        assert body["items"][0] == {
            "id": str(top["id"]),
            "name": top["name"],
            "surname": top["surname"],
            "email": top["email"],
        }

    @pytest.mark.asyncio
    async def test_address_not_listed(self, client):
        """Test the address column is not part of the listing."""
        response = await client.get(USERS_URL)
        assert all("address" not in item for item in response.json()["items"])

    @pytest.mark.asyncio
    async def test_walk_forward_and_back(self, client):
        """Test following cursors forward and then back one page."""
        first = (await client.get(USERS_URL, params={"pageSize": 10})).json()
        second = (
            await client.get(USERS_URL, params={"pageSize": 10, "cursor": first["cursor"]})
        ).json()
        third = (
            await client.get(USERS_URL, params={"pageSize": 10, "cursor": second["cursor"]})
        ).json()
        back = (
            await client.get(
                USERS_URL,
                params={"pageSize": 10, "cursor": second["cursor"], "isNext": "false"},
            )
        ).json()

        assert second["hasPrevious"] is True
        assert len(third["items"]) == 5
        assert third["hasMore"] is False
        assert third["cursor"] is None
        assert back["items"] == first["items"]

    @pytest.mark.asyncio
    async def test_name_filter_and_sort(self, client):
        """Test name and sort query parameters reach the filter."""
        response = await client.get(USERS_URL, params={"name": "Ada", "sort": "name_asc"})

        assert response.status_code == 200
        items = response.json()["items"]
        assert len(items) == 5
        assert {item["name"] for item in items} == {"Ada"}
        assert [item["surname"] for item in items] == sorted(item["surname"] for item in items)

    @pytest.mark.asyncio
    async def test_cursor_from_other_filter_restarts(self, client):
        """Test a cursor minted for another name restarts from the first page."""
        first = (await client.get(USERS_URL)).json()
        ada = (await client.get(USERS_URL, params={"name": "Ada", "pageSize": 2})).json()

        response = await client.get(USERS_URL, params={"cursor": ada["cursor"]})

        assert response.json()["items"] == first["items"]

    @pytest.mark.asyncio
    async def test_malformed_cursor_restarts(self, client):
        """Test a garbage cursor is not an error."""
        first = (await client.get(USERS_URL)).json()
        response = await client.get(USERS_URL, params={"cursor": "garbage!!"})

        assert response.status_code == 200
        assert response.json()["items"] == first["items"]

    @pytest.mark.asyncio
    async def test_oversized_position_restarts(self, client):
        """Test a cursor whose position cannot be bound restarts instead of failing."""
        first = (await client.get(USERS_URL)).json()
        payload = {
            "Version": CURSOR_VERSION,
            "Kind": UserFilter.kind,
            "LastId": str(uuid4()),
            "Entity": UserFilter().model_dump(mode="json"),
            "Position": 10**30,
        }
        token = base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")

        response = await client.get(USERS_URL, params={"cursor": token.rstrip("=")})

        assert response.status_code == 200
        assert response.json()["items"] == first["items"]
        assert response.json()["hasPrevious"] is False


class TestListUsersErrors:
    """Test error responses."""

    @pytest.mark.asyncio
    async def test_empty_page_is_404(self, client):
        """Test a page with no rows returns 404."""
        response = await client.get(USERS_URL, params={"name": "Nobody"})

        assert response.status_code == 404
        assert response.json() == {
            "detail": "No more results",
            "errors": {"has_previous": False},
        }

    @pytest.mark.asyncio
    async def test_backward_without_cursor_is_400(self, client):
        """Test isNext=false without a cursor is a bad request."""
        response = await client.get(USERS_URL, params={"isNext": "false"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Backward navigation requires a cursor"

    @pytest.mark.asyncio
    async def test_page_size_over_max_is_400(self, client, settings):
        """Test pageSize above the configured maximum is rejected."""
        response = await client.get(
            USERS_URL, params={"pageSize": settings.pagination.max_page_size + 1}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_size", ["0", "-3", "ten"])
    async def test_invalid_page_size_is_422(self, client, page_size):
        """Test non-positive or non-integer pageSize fails request validation."""
        response = await client.get(USERS_URL, params={"pageSize": page_size})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_sort_is_422(self, client):
        """Test sort only accepts known values."""
        response = await client.get(USERS_URL, params={"sort": "by_shoe_size"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_store_unavailable_is_503(self, app, client, mock_session, settings):
        """Test a backing store failure returns 503."""

        def failing_service() -> UserService:
            service = UserService(mock_session, settings)
            service.assembler._fetch_rows = AsyncMock(
                side_effect=StoreUnavailableError("Backing store query failed")
            )
            return service

        app.dependency_overrides[get_user_service] = failing_service
        response = await client.get(USERS_URL)

        assert response.status_code == 503
        assert response.json()["detail"] == "Backing store query failed"

    @pytest.mark.asyncio
    async def test_invariant_violation_is_500(self, app, client, mock_session, settings):
        """Test a sentinel accounting defect returns 500."""

        def broken_service() -> UserService:
            service = UserService(mock_session, settings)
            service.assembler._fetch_rows = AsyncMock(
                side_effect=PaginationInvariantError("Ranked rows are not strictly increasing")
            )
            return service

        app.dependency_overrides[get_user_service] = broken_service
        response = await client.get(USERS_URL)

        assert response.status_code == 500
