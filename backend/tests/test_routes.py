"""
RondaGuard Backend - HTTP Route Tests
=====================================

What:  The JSON API through httpx + ASGITransport against a SQLite store.

What we test:
    ✅ camelCase in, camelCase out, {"success": true} on writes
    ✅ Error bodies and status codes (400, 401, 403, 404, 409, 422, 503)
    ✅ Health check
"""

import pytest
from httpx import AsyncClient, ASGITransport

from rondaguard.exceptions import ValidationError
from rondaguard.main import create_app
from rondaguard.security import hash_password


class TestTemplateRoutes:

    @pytest.mark.asyncio
    async def test_post_then_list(self, test_client, sample_template):
        response = await test_client.post("/api/templates", json=sample_template)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = await test_client.get("/api/templates")
        assert response.status_code == 200
        assert response.json() == [sample_template]

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, test_client):
        response = await test_client.get("/api/templates/nope")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["details"]["resource_id"] == "nope"

    @pytest.mark.asyncio
    async def test_delete(self, test_client, sample_template):
        await test_client.post("/api/templates", json=sample_template)
        response = await test_client.delete("/api/templates/tpl-1")
        assert response.json() == {"success": True}
        assert (await test_client.get("/api/templates")).json() == []


class TestTaskRoutes:

    @pytest.mark.asyncio
    async def test_round_trip_uses_camel_case(self, test_client, sample_task):
        await test_client.post("/api/tasks", json=sample_task)

        response = await test_client.get("/api/tasks", params={"sector": "North"})
        assert response.status_code == 200
        task = response.json()[0]
        assert task["ticketId"] == "TCK-42"
        assert task["createdAt"] == 1700000000000
        assert [(c["label"], c["checked"]) for c in task["checklist"]] == [
            ("Fence intact", True),
            ("Lights on", False),
        ]
        assert all(isinstance(c["id"], str) for c in task["checklist"])

    @pytest.mark.asyncio
    async def test_missing_created_at_is_rejected(self, test_client, sample_task):
        del sample_task["createdAt"]
        response = await test_client.post("/api/tasks", json=sample_task)
        assert response.status_code == 422


class TestRoundRoutes:

    @pytest.mark.asyncio
    async def test_post_and_filter(self, test_client, sample_round):
        response = await test_client.post("/api/rounds", json=sample_round)
        assert response.json() == {"success": True}

        response = await test_client.get("/api/rounds", params={"taskId": "t-1"})
        rounds = response.json()
        assert [r["id"] for r in rounds] == ["r1"]
        assert rounds[0]["checklistState"] == {"item1": True, "item2": False}
        assert rounds[0]["photos"] == ["cGhvdG8x", "cGhvdG8y"]

        response = await test_client.get("/api/rounds", params={"taskId": "other"})
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_duplicate_round_is_409(self, test_client, sample_round):
        await test_client.post("/api/rounds", json=sample_round)
        response = await test_client.post("/api/rounds", json=sample_round)
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert "driver_error" not in (body["details"] or {})

    @pytest.mark.asyncio
    async def test_inverted_range_is_400(self, test_client):
        response = await test_client.get("/api/rounds", params={"since": 10, "until": 5})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestSettingsRoutes:

    @pytest.mark.asyncio
    async def test_defaults(self, test_client):
        response = await test_client.get("/api/settings")
        assert response.status_code == 200
        assert response.json() == {
            "companyName": "RondaGuard",
            "headerColor": "#203060",
            "logo": None,
        }

    @pytest.mark.asyncio
    async def test_save(self, test_client):
        body = {"companyName": "Acme", "headerColor": "#112233", "logo": None}
        assert (await test_client.post("/api/settings", json=body)).json() == {"success": True}
        assert (await test_client.get("/api/settings")).json() == body


class TestUserRoutes:

    @pytest.mark.asyncio
    async def test_login_flow(self, test_client, sample_user):
        await test_client.post("/api/users", json=sample_user)

        response = await test_client.post(
            "/api/login", json={"email": "ana@example.com", "password": "s3cret"}
        )
        assert response.status_code == 200
        assert response.json() == {
            "id": "u-1",
            "name": "Ana Souza",
            "email": "ana@example.com",
            "role": "guard",
            "active": True,
        }

    @pytest.mark.asyncio
    async def test_login_wrong_password_is_401(self, test_client, sample_user):
        await test_client.post("/api/users", json=sample_user)
        response = await test_client.post(
            "/api/login", json={"email": "ana@example.com", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_deactivated_user_is_403(self, test_client, sample_user):
        await test_client.post("/api/users", json=sample_user)
        response = await test_client.put("/api/users/u-1/status", json={"active": False})
        assert response.json() == {"success": True}

        response = await test_client.post(
            "/api/login", json={"email": "ana@example.com", "password": "s3cret"}
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_new_user_without_password_is_400(self, test_client, sample_user):
        del sample_user["password"]
        response = await test_client.post("/api/users", json=sample_user)
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "password_hash"

    @pytest.mark.asyncio
    async def test_status_of_missing_user_is_404(self, test_client):
        response = await test_client.put("/api/users/ghost/status", json={"active": True})
        assert response.status_code == 404


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_no_database_is_503(self):
        app = create_app(database=None)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            health = await client.get("/health")
            tasks = await client.get("/api/tasks")

        assert health.status_code == 503
        assert health.json()["database"] == "disconnected"
        assert tasks.status_code == 503
        assert tasks.json()["error"] == "transient_store_error"


class TestSecretLength:

    @pytest.mark.asyncio
    async def test_overlong_password_is_a_validation_response(self, test_client, sample_user):
        response = await test_client.post("/api/users", json=dict(sample_user, password="x" * 100))
        assert response.status_code == 422
        assert "detail" in response.json()
        assert (await test_client.get("/api/users")).json() == []

    @pytest.mark.asyncio
    async def test_overlong_login_password_is_a_validation_response(self, test_client):
        response = await test_client.post(
            "/api/login", json={"email": "ana@example.com", "password": "é" * 40}
        )
        assert response.status_code == 422

    def test_hash_password_rejects_more_than_72_bytes(self):
        with pytest.raises(ValidationError) as exc_info:
            hash_password("x" * 73)
        assert exc_info.value.field == "password"
