"""
SIA API: Application-Level Tests
================================

What we test:
    ✅ /health reports database status (200 / 503)
    ✅ Every error uses {error, message, details, request_id}
    ✅ 500 responses never leak the underlying error text
    ✅ Storage timeouts surface as 503
    ✅ Rate limiting answers 429 with Retry-After and the request id
    ✅ Lifespan creates tables when configured to
    ✅ Settings validation
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError as PydanticValidationError

from sia_api import __version__
from sia_api.config import DEV_JWT_SECRET, Settings
from sia_api.exceptions import DatabaseError, StorageTimeoutError
from sia_api.main import create_app

from conftest import TEST_PASSWORD, TEST_SECRET


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == __version__
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_database_down_is_503(self, app, test_client):
        with patch.object(app.state.database, "ping", AsyncMock(return_value=False)):
            response = await test_client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"


class TestErrorFormat:
    @pytest.mark.asyncio
    async def test_database_error_is_scrubbed(self, app, test_client):
        async def boom():
            raise DatabaseError(
                message="relation users has secret column xyz",
                context={"sql": "SELECT secret FROM users"},
            )

        app.add_api_route("/boom", boom, methods=["GET"])
        response = await test_client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"error", "message", "details", "request_id"}
        assert body["error"] == "server_error"
        assert "secret" not in response.text

    @pytest.mark.asyncio
    async def test_storage_timeout_is_503(self, app, test_client):
        async def slow():
            raise StorageTimeoutError(timeout=5.0)

        app.add_api_route("/slow", slow, methods=["GET"])
        response = await test_client.get("/slow")

        assert response.status_code == 503
        assert response.json()["error"] == "service_unavailable"

    @pytest.mark.asyncio
    async def test_request_id_round_trip(self, test_client):
        response = await test_client.post(
            "/api/auth/login",
            json={"email": "x@example.com", "password": "whatever"},
            headers={"X-Request-ID": "trace-me"},
        )
        assert response.headers["X-Request-ID"] == "trace-me"
        assert response.json()["request_id"] == "trace-me"

    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/health")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            "/api/auth/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert isinstance(response.json()["details"]["errors"], list)


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_excess_requests_get_429(self, test_settings):
        settings = test_settings.model_copy(update={"rate_limit_requests": 10})
        app = create_app(settings)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(10):
                assert (await client.get("/api/roles")).status_code == 401
            limited = await client.get("/api/roles", headers={"X-Request-ID": "rl-1"})
            # Never limited.
            health = await client.get("/health")

        assert limited.status_code == 429
        assert int(limited.headers["Retry-After"]) >= 1
        body = limited.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["details"] == {"retry_after": int(limited.headers["Retry-After"])}
        assert body["request_id"] == "rl-1"
        assert limited.headers["X-Request-ID"] == "rl-1"
        assert health.status_code in (200, 503)
        await app.state.database.dispose()


class TestLifespan:
    @pytest.mark.asyncio
    async def test_startup_creates_tables_when_enabled(self, test_settings):
        settings = test_settings.model_copy(update={"db_create_tables": True})
        app = create_app(settings)

        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post(
                    "/api/auth/register",
                    json={"email": "boot@example.com", "password": TEST_PASSWORD},
                )
        assert response.status_code == 201


class TestSettings:
    def test_dev_secret_fails_production_check(self):
        with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
            Settings(jwt_secret_key=DEV_JWT_SECRET).validate_required_for_production()

    def test_short_secret_fails_production_check(self):
        with pytest.raises(ValueError, match="32 characters"):
            Settings(jwt_secret_key="short").validate_required_for_production()

    def test_strong_secret_passes(self):
        Settings(jwt_secret_key=TEST_SECRET).validate_required_for_production()

    def test_unsupported_algorithm_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(jwt_algorithm="none")

    def test_derived_values(self):
        settings = Settings(
            access_token_ttl_seconds=60,
            cors_origins="http://a.test, http://b.test",
            log_level="debug",
        )
        assert settings.access_token_ttl.total_seconds() == 60
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
        assert settings.log_level == "DEBUG"
