"""
Coffee API - Route Tests (HTTP, SQLite-backed)
===============================================

What:  End-to-end tests of the five endpoints through the ASGI app.
How:   HTTPX AsyncClient over ASGITransport; a temporary SQLite database
       stands in for MySQL.

What we test:
    ✅ Create coffee → visible in list
    ✅ Create drink for existing coffee → listed with nested Coffee
    ✅ Unknown coffee_id → 400, nothing persisted
    ✅ Missing fields → 400, nothing persisted
    ✅ Data-layer failures → opaque 500
    ✅ /health always 200
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from coffee_api.database import Database, get_db_session
from coffee_api.main import create_app


async def _create_coffee(client, name="Arabica", country="Colombia"):
    response = await client.post("/coffee", json={"name": name, "country": country})
    assert response.status_code == 201
    return response.json()["data"]


class TestCoffeeEndpoints:
    """POST /coffee and GET /coffee/list."""

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/coffee/list")
        assert response.status_code == 200
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_create_coffee_returns_201(self, test_client):
        response = await test_client.post(
            "/coffee", json={"name": "Arabica", "country": "Colombia"}
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert isinstance(data["id"], int) and data["id"] > 0
        assert data["name"] == "Arabica"
        assert data["country"] == "Colombia"

    @pytest.mark.asyncio
    async def test_created_coffee_visible_in_list(self, test_client):
        created = await _create_coffee(test_client, "Robusta", "Vietnam")

        response = await test_client.get("/coffee/list")

        assert response.status_code == 200
        assert created in response.json()["data"]

    @pytest.mark.asyncio
    async def test_list_is_stable_without_writes(self, test_client):
        await _create_coffee(test_client, "Geisha", "Panama")
        await _create_coffee(test_client, "Bourbon", "Rwanda")

        first = await test_client.get("/coffee/list")
        second = await test_client.get("/coffee/list")

        assert first.json() == second.json()
        assert [c["name"] for c in first.json()["data"]] == ["Geisha", "Bourbon"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"name": "Arabica"},
            {"country": "Colombia"},
            {"name": "", "country": "Colombia"},
            {"name": "Arabica", "country": ""},
        ],
    )
    async def test_missing_field_returns_400(self, test_client, payload):
        response = await test_client.post("/coffee", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "name and country are required"}

        listing = await test_client.get("/coffee/list")
        assert listing.json()["data"] == []

    @pytest.mark.asyncio
    async def test_malformed_body_returns_400(self, test_client):
        response = await test_client.post(
            "/coffee",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()


class TestCoffeeDrinkEndpoints:
    """POST /coffee/drinks and GET /coffee/drinks/list."""

    @pytest.mark.asyncio
    async def test_create_drink_and_list_with_nested_coffee(self, test_client):
        coffee = await _create_coffee(test_client, "Arabica", "Colombia")

        created = await test_client.post(
            "/coffee/drinks", json={"name": "Latte", "coffee_id": coffee["id"]}
        )
        assert created.status_code == 201
        drink = created.json()["data"]
        assert drink["name"] == "Latte"
        assert drink["coffee_id"] == coffee["id"]
        assert drink["description"] is None
        assert "Coffee" not in drink

        response = await test_client.get("/coffee/drinks/list")

        assert response.status_code == 200
        drinks = response.json()["data"]
        latte = next(d for d in drinks if d["name"] == "Latte")
        assert latte["Coffee"] == {
            "id": coffee["id"],
            "name": "Arabica",
            "country": "Colombia",
        }

    @pytest.mark.asyncio
    async def test_create_drink_keeps_description(self, test_client):
        coffee = await _create_coffee(test_client)

        response = await test_client.post(
            "/coffee/drinks",
            json={
                "name": "Cortado",
                "coffee_id": coffee["id"],
                "description": "Espresso cut with warm milk",
            },
        )

        assert response.status_code == 201
        assert response.json()["data"]["description"] == "Espresso cut with warm milk"

    @pytest.mark.asyncio
    async def test_unknown_coffee_returns_400_and_persists_nothing(self, test_client):
        response = await test_client.post(
            "/coffee/drinks", json={"name": "Mocha", "coffee_id": 999999}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No coffee found with id 999999"}

        listing = await test_client.get("/coffee/drinks/list")
        assert listing.json() == {"data": []}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"name": "Latte"},
            {"coffee_id": 1},
            {"name": "", "coffee_id": 1},
        ],
    )
    async def test_missing_field_returns_400(self, test_client, payload):
        await _create_coffee(test_client)

        response = await test_client.post("/coffee/drinks", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "name and coffee_id are required"}

        listing = await test_client.get("/coffee/drinks/list")
        assert listing.json()["data"] == []

    @pytest.mark.asyncio
    async def test_non_integer_coffee_id_returns_400(self, test_client):
        response = await test_client.post(
            "/coffee/drinks", json={"name": "Latte", "coffee_id": "abc"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}


class TestDataLayerFailures:
    """Database errors during a request become an opaque 500."""

    @pytest.fixture
    def failing_session(self):
        session = AsyncMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )
        session.get = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )
        return session

    @pytest.fixture
    def override_session(self, app, failing_session):
        async def _failing_db_session():
            yield failing_session

        app.dependency_overrides[get_db_session] = _failing_db_session

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/coffee/list", "/coffee/drinks/list"])
    async def test_list_failure_returns_500(self, test_client, override_session, path):
        response = await test_client.get(path)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    @pytest.mark.asyncio
    async def test_lookup_failure_returns_500(self, test_client, override_session):
        response = await test_client.post(
            "/coffee/drinks", json={"name": "Latte", "coffee_id": 1}
        )

        assert response.status_code == 500
        assert "connection lost" not in response.text


class TestHealthAndMisc:

    @pytest.mark.asyncio
    async def test_health_ok(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_health_ok_without_database(self, service_config):
        """A database that cannot even be reached does not affect /health."""
        unreachable = Database("mysql+aiomysql://nobody@127.0.0.1:1/none")
        app = create_app(service_config, unreachable)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        await unreachable.dispose()

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/coffee/list", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_shape(self, test_client):
        response = await test_client.get("/tea/list")
        assert response.status_code == 404
        assert "error" in response.json()
