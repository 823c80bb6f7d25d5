"""
Tests for the service banner, health and status endpoints and the error envelope.
"""

import pytest

from callcoach_backend.controllers import system_controller


@pytest.fixture
def database_up(monkeypatch):
    async def ping():
        return True

    monkeypatch.setattr(system_controller, "ping_database", ping)


class TestSystemRoutes:
    async def test_service_info(self, client):
        response = await client.get("/")

        body = response.json()
        assert body["success"] is True
        assert body["data"]["endpoints"]["coaching"] == "/api/coaching"

    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    async def test_health(self, client, database_up, path):
        response = await client.get(path)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "healthy"
        assert data["database"] == "connected"

    async def test_status_reports_providers(self, client, database_up):
        response = await client.get("/api/status")

        services = response.json()["data"]["services"]
        assert services["database"]["connected"] is True
        assert services["stt"]["provider"] == "fake"
        assert services["stt"]["connected"] is True
        assert services["llm"]["provider"] == "fake-model"

    async def test_status_without_providers(self, client, app, database_up):
        from callcoach_backend.llm_client import get_llm_client_dependency
        from callcoach_backend.services.transcription import get_transcription_provider_dependency

        app.dependency_overrides[get_transcription_provider_dependency] = lambda: None
        app.dependency_overrides[get_llm_client_dependency] = lambda: None

        data = (await client.get("/api/status")).json()["data"]

        assert data["services"]["stt"] == {"provider": None, "configured": False, "connected": False}
        assert data["services"]["llm"]["configured"] is False
        assert data["openai"]["gpt"] is False


class TestErrorEnvelope:
    async def test_unknown_route(self, client):
        response = await client.get("/api/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body == {
            "success": False,
            "message": "Route not found",
            "error": "Cannot GET /api/nowhere",
            "requestId": response.headers["X-Request-ID"],
        }

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/api/upload/abc", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["requestId"] == "req-123"
