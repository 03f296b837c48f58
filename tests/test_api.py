"""Tests for the bootcamp HTTP endpoints."""
import pytest
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from pymongo.errors import ServerSelectionTimeoutError

from devcamper.main import app
from devcamper.services import bootcamps as bootcamp_service

from conftest import auth_headers, bootcamp_data, make_token

BASE = "/api/v1/bootcamps"


async def publish(client, subject="u1", role="publisher", **overrides):
    response = await client.post(
        BASE, json=bootcamp_data(**overrides), headers=auth_headers(subject, role)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestReadEndpoints:
    """Tests for public reads."""

    @pytest.mark.asyncio
    async def test_get_bootcamp(self, client):
        """Should return the bootcamp in a success envelope."""
        created = await publish(client)

        response = await client.get(f"{BASE}/{created['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"] == created["id"]
        assert body["data"]["user"] == "u1"
        assert "publisher_slot" not in body["data"]

    @pytest.mark.asyncio
    async def test_get_missing_bootcamp(self, client):
        """Should return a 404 error envelope naming the id."""
        missing = str(ObjectId())
        response = await client.get(f"{BASE}/{missing}")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == f"Bootcamp not found with id of {missing}"

    @pytest.mark.asyncio
    async def test_stat_route_not_treated_as_id(self, client):
        """Should serve statistics rather than an id lookup."""
        response = await client.get(f"{BASE}/stat")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"jobAssistance": [], "jobGuarantee": [], "housing": []},
        }

    @pytest.mark.asyncio
    async def test_stat_buckets_shape(self, client):
        """Should label each group with the flag it groups by."""
        await publish(client, careers=["Business"], housing=False)

        data = (await client.get(f"{BASE}/stat")).json()["data"]
        assert data["housing"] == [{"_id": {"housing": False}, "sum": 1, "allCareers": ["Business"]}]
        assert data["jobGuarantee"][0]["_id"] == {"jobGuarantee": False}
        assert data["jobAssistance"][0]["_id"] == {"jobAssistance": True}

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        """Should echo the caller's request id."""
        response = await client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"


class TestCreateEndpoint:
    """Tests for POST /bootcamps."""

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        """Should reject anonymous callers."""
        response = await client.post(BASE, json=bootcamp_data())
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Not authorized to access this route"}

    @pytest.mark.asyncio
    async def test_rejects_bad_token(self, client):
        """Should reject tokens signed with another secret."""
        token = make_token("u1", secret="wrong-secret")
        response = await client.post(
            BASE, json=bootcamp_data(), headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_plain_user_forbidden(self, client):
        """Should reject roles outside publisher and admin."""
        response = await client.post(BASE, json=bootcamp_data(), headers=auth_headers("u9", "user"))
        assert response.status_code == 403
        assert "user" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_invalid_body(self, client):
        """Should return a 400 envelope for schema violations."""
        response = await client.post(
            BASE,
            json=bootcamp_data(careers=["Underwater Basket Weaving"]),
            headers=auth_headers("u1"),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "careers" in body["error"]

    @pytest.mark.asyncio
    async def test_body_owner_ignored(self, client):
        """Should assign the caller as owner whatever the body says."""
        created = await publish(client, subject="u1", user="u2")
        assert created["user"] == "u1"


class TestOwnershipScenario:
    """End-to-end walk through the ownership rules."""

    @pytest.mark.asyncio
    async def test_publisher_admin_and_intruder(self, client):
        b1 = await publish(client, subject="u1")

        second = await client.post(
            BASE, json=bootcamp_data(name="B2"), headers=auth_headers("u1")
        )
        assert second.status_code == 400
        assert second.json()["error"] == "The user with ID u1 has already published a bootcamp"

        await publish(client, subject="admin-1", role="admin", name="B3")
        await publish(client, subject="admin-1", role="admin", name="B4")

        updated = await client.put(
            f"{BASE}/{b1['id']}", json={"housing": False}, headers=auth_headers("u1")
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["housing"] is False
        assert updated.json()["data"]["name"] == b1["name"]

        intrusion = await client.delete(f"{BASE}/{b1['id']}", headers=auth_headers("u2"))
        assert intrusion.status_code == 401
        assert intrusion.json()["error"] == "User u2 is not authorized to delete this bootcamp"

        still_there = await client.get(f"{BASE}/{b1['id']}")
        assert still_there.status_code == 200


class TestMutationEndpoints:
    """Tests for PUT and DELETE."""

    @pytest.mark.asyncio
    async def test_update_unknown_field_rejected(self, client):
        """Should refuse fields outside the bootcamp schema."""
        created = await publish(client)
        response = await client.put(
            f"{BASE}/{created['id']}", json={"user": "u2"}, headers=auth_headers("u1")
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_missing(self, client):
        """Should return 404 for unknown ids."""
        response = await client.put(
            f"{BASE}/{ObjectId()}", json={"housing": True}, headers=auth_headers("u1")
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_null_required_field_rejected(self, client):
        """Should refuse to clear a required field."""
        created = await publish(client)
        response = await client.put(
            f"{BASE}/{created['id']}", json={"name": None}, headers=auth_headers("u1")
        )
        assert response.status_code == 400
        assert "name cannot be null" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_update_null_clears_optional_field(self, client):
        created = await publish(client, website="https://devworks.com")
        response = await client.put(
            f"{BASE}/{created['id']}", json={"website": None}, headers=auth_headers("u1")
        )
        assert response.status_code == 200
        assert response.json()["data"]["website"] is None

    @pytest.mark.asyncio
    async def test_delete_then_get(self, client):
        """Should return an empty data payload and then 404."""
        created = await publish(client)

        response = await client.delete(f"{BASE}/{created['id']}", headers=auth_headers("u1"))
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}

        assert (await client.get(f"{BASE}/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_requires_token(self, client):
        """Should reject anonymous deletes."""
        created = await publish(client)
        response = await client.delete(f"{BASE}/{created['id']}")
        assert response.status_code == 401


class TestListEndpoint:
    """Tests for GET /bootcamps."""

    @pytest.mark.asyncio
    async def test_empty_listing(self, client):
        response = await client.get(BASE)
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "count": 0,
            "total": 0,
            "pagination": {},
            "data": [],
        }

    @pytest.mark.asyncio
    async def test_filter_sort_and_select(self, client):
        """Should filter with operators, sort and project fields."""
        await publish(client, subject="u1", name="Cheap", average_cost=5000)
        await publish(client, subject="u2", name="Mid", average_cost=9000)
        await publish(client, subject="u3", name="Pricey", average_cost=15000)

        response = await client.get(
            BASE,
            params={"average_cost[lte]": "10000", "sort": "-average_cost", "select": "name,average_cost"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [b["name"] for b in body["data"]] == ["Mid", "Cheap"]
        assert set(body["data"][0]) == {"id", "name", "average_cost"}

    @pytest.mark.asyncio
    async def test_pagination(self, client):
        """Should page results and link neighbouring pages."""
        for i in range(5):
            await publish(client, subject=f"u{i}", name=f"Camp {i}")

        first = (await client.get(BASE, params={"limit": 2, "page": 1})).json()
        assert first["count"] == 2
        assert first["total"] == 5
        assert first["pagination"] == {"next": {"page": 2, "limit": 2}}

        last = (await client.get(BASE, params={"limit": 2, "page": 3})).json()
        assert last["count"] == 1
        assert last["pagination"] == {"prev": {"page": 2, "limit": 2}}

    @pytest.mark.asyncio
    async def test_unknown_filter_field(self, client):
        """Should reject filters on fields bootcamps do not have."""
        response = await client.get(BASE, params={"publisher_slot": "u1"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_numeric_looking_text_fields_match(self, client):
        """Should compare text fields as text even when the value looks numeric."""
        await publish(client, subject="42", name="Numbered Owner")
        await publish(client, subject="u2", name="Dialable", phone="5551234")

        by_owner = (await client.get(BASE, params={"user": "42"})).json()
        assert [b["name"] for b in by_owner["data"]] == ["Numbered Owner"]

        by_phone = (await client.get(BASE, params={"phone": "5551234"})).json()
        assert [b["name"] for b in by_phone["data"]] == ["Dialable"]

    @pytest.mark.asyncio
    async def test_non_boolean_flag_filter(self, client):
        response = await client.get(BASE, params={"housing": "yes"})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "housing must be true or false"}

    @pytest.mark.asyncio
    async def test_select_id_only(self, client):
        """Should return nothing but ids when only id is selected."""
        created = await publish(client)

        body = (await client.get(BASE, params={"select": "id"})).json()
        assert body["data"] == [{"id": created["id"]}]


class TestServerErrors:
    """Tests for unexpected failures."""

    @pytest.mark.asyncio
    async def test_store_failure_returns_server_error(self, test_db, monkeypatch):
        """Should hide the failure behind a generic 500 envelope."""
        async def store_down(bootcamp_id):
            raise ServerSelectionTimeoutError("mongodb:27017: timed out")

        monkeypatch.setattr(bootcamp_service, "find_bootcamp", store_down)

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(
                f"{BASE}/{ObjectId()}", headers={"X-Request-ID": "trace-500"}
            )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Server Error"}
        assert response.headers["X-Request-ID"] == "trace-500"
