"""
Unit tests for Main Application module.

This module contains unit tests for the FastAPI application factory,
middleware, exception handlers, and application lifecycle.
"""

from unittest.mock import patch

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient

from app.core.config import EnvironmentEnum, Settings
from app.database import Database
from app.exceptions.base import NotFoundError
from app.main import create_app, lifespan
from models import Conversation


class TestAppCreation:
    """Test cases for FastAPI application creation."""

    def test_create_app_uses_settings(self, test_settings, database, fake_provider):
        test_app = create_app(test_settings, database=database, inference_provider=fake_provider)

        assert test_app.title == "SeaChat API"
        assert test_app.state.settings is test_settings
        assert test_app.state.database is database
        assert test_app.state.inference_provider is fake_provider

    def test_docs_disabled_outside_development(self, test_settings):
        test_app = create_app(test_settings)

        assert test_app.docs_url is None
        assert test_app.redoc_url is None

    def test_docs_enabled_in_development(self, test_settings):
        config = test_settings.model_copy(update={"environment": EnvironmentEnum.development})

        test_app = create_app(config)

        assert test_app.docs_url == "/docs"

    def test_database_built_from_settings(self, test_settings):
        test_app = create_app(test_settings)

        assert test_app.state.database.url == test_settings.database_url
        assert test_app.state.inference_provider is None

    def test_routes_registered(self, app):
        paths = set(app.openapi()["paths"])

        assert {
            "/chat",
            "/conversations",
            "/conversations/{conversation_id}",
            "/check",
            "/test-inference",
            "/health",
            "/",
        } <= paths


class TestMiddleware:
    """Test cases for application middleware."""

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        first = await client.get("/")
        second = await client.get("/")

        assert first.headers["X-Request-ID"]
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_cors_preflight(self, client):
        response = await client.options(
            "/chat",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestExceptionHandlers:
    """Test cases for global exception handlers."""

    @pytest.mark.asyncio
    async def test_app_exception_shape(self, app):
        @app.get("/boom-not-found")
        async def boom_not_found():
            raise NotFoundError("Conversation not found")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/boom-not-found")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        data = response.json()
        assert data["error"] == "Conversation not found"
        assert data["type"] == "NOT_FOUND"
        assert data["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_validation_error_is_400(self, client):
        response = await client.post("/chat", json={"messages": "not a list"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["error"] == "Validation error"
        assert data["type"] == "VALIDATION_ERROR"
        assert data["details"][0]["loc"][0] == "body"

    @pytest.mark.asyncio
    async def test_unhandled_exception_is_generic_500(self, app):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret internals")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"] == "An unexpected error occurred"
        assert "secret internals" not in response.text

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/nowhere")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Not Found"


class TestBuiltinRoutes:
    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "SeaChat API"

    @pytest.mark.asyncio
    async def test_health_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"] == {"database": "healthy", "ai_service": "configured"}

    @pytest.mark.asyncio
    async def test_health_database_down(self, client, database, monkeypatch):
        async def failing_ping():
            raise OSError("connection refused")

        monkeypatch.setattr(database, "ping", failing_ping)

        response = await client.get("/health")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["services"]["database"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_health_without_database(self, test_settings, fake_provider):
        test_app = create_app(test_settings, database=Database(None), inference_provider=fake_provider)

        async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
            response = await ac.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["services"]["database"] == "not_configured"


class TestLifespan:
    @pytest.mark.asyncio
    async def test_creates_tables_and_disposes(self, test_settings, fake_provider, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'lifespan.db'}")
        test_app = create_app(test_settings, database=database, inference_provider=fake_provider)

        with patch("app.main.setup_logging") as mock_setup_logging:
            async with lifespan(test_app):
                async with database.session_factory() as session:
                    assert await session.get(Conversation, "missing") is None

        mock_setup_logging.assert_called_once_with(test_settings)
        assert database._engine is None

    @pytest.mark.asyncio
    async def test_skips_unconfigured_database(self, test_settings, fake_provider):
        test_app = create_app(test_settings, database=Database(None), inference_provider=fake_provider)

        with patch("app.main.setup_logging"):
            async with lifespan(test_app):
                pass

    @pytest.mark.asyncio
    async def test_production_without_session_secret_refuses_to_start(self, fake_provider, monkeypatch):
        for name in ("SESSION_SECRET", "NEXTAUTH_SECRET"):
            monkeypatch.delenv(name, raising=False)
        config = Settings(
            _env_file=None,
            environment="production",
            database_url="postgresql+asyncpg://chat@db/chat",
            openai_api_key="sk-test",
            google_client_id="client-id",
            google_client_secret="client-secret",
        )
        test_app = create_app(config, database=Database(None), inference_provider=fake_provider)

        with patch("app.main.setup_logging"):
            with pytest.raises(ValueError, match="SESSION_SECRET is required in production"):
                async with lifespan(test_app):
                    pass
