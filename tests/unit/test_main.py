"""Unit tests for main application module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from app.core.config import AppEnvironment, LogLevel, Settings
from app.main import API_V1_PREFIX, create_app, lifespan, run, setup_telemetry


class TestCreateApp:
    """Test create_app function."""

    def test_create_app_returns_fastapi(self):
        """Test that create_app returns a FastAPI instance."""
        app = create_app()
        assert isinstance(app, FastAPI)
        assert app.title == "Cursor Pagination API"

    def test_create_app_includes_routers(self):
        """Test that create_app mounts health and users under /api/v1."""
        route_paths = {getattr(r, "path", "") for r in create_app().routes}

        assert f"{API_V1_PREFIX}/health" in route_paths
        assert f"{API_V1_PREFIX}/health/ready" in route_paths
        assert f"{API_V1_PREFIX}/users" in route_paths

    def test_docs_disabled_in_prod(self):
        """Test OpenAPI docs are not served in prod."""
        settings = Settings()
        settings.app.env = AppEnvironment.PROD

        with patch("app.main.get_settings", return_value=settings):
            app = create_app()

        assert app.docs_url is None
        assert app.openapi_url is None


class TestSetupTelemetry:
    """Test OpenTelemetry wiring."""

    def test_no_endpoint_is_noop(self):
        """Test telemetry is skipped without an OTLP endpoint."""
        settings = MagicMock()
        settings.observability.otlp_endpoint = None

        with patch("app.main.FastAPIInstrumentor") as instrumentor:
            setup_telemetry(MagicMock(), settings)

        instrumentor.instrument_app.assert_not_called()

    def test_endpoint_instruments_app(self):
        """Test an OTLP endpoint installs a tracer provider and instruments the app."""
        settings = MagicMock()
        settings.observability.otlp_endpoint = "http://collector:4317"
        settings.observability.otlp_insecure = True
        settings.observability.service_name = "cursor-pagination"
        app = MagicMock()

        with (
            patch("app.main.OTLPSpanExporter") as exporter,
            patch("app.main.BatchSpanProcessor"),
            patch("app.main.trace.set_tracer_provider") as set_provider,
            patch("app.main.FastAPIInstrumentor") as instrumentor,
        ):
            setup_telemetry(app, settings)

        exporter.assert_called_once_with(endpoint="http://collector:4317", insecure=True)
        set_provider.assert_called_once()
        instrumentor.instrument_app.assert_called_once_with(app)


class TestLifespan:
    """Test application lifespan."""

    @pytest.mark.asyncio
    async def test_lifespan_sets_state_and_disposes(self):
        """Test lifespan stores settings and engine, then resets the engine."""
        app = MagicMock()
        engine = MagicMock()

        with (
            patch("app.main.setup_logging") as setup,
            patch("app.main.get_engine", return_value=engine),
            patch("app.main.reset_engine", new_callable=AsyncMock) as reset,
        ):
            async with lifespan(app):
                assert app.state.engine is engine
                setup.assert_called_once()
            reset.assert_awaited_once()


class TestRun:
    """Test run entry point."""

    def test_run_uses_factory(self):
        """Test uvicorn is started with the app factory."""
        settings = MagicMock()
        settings.app.env = AppEnvironment.PROD
        settings.app.log_level = LogLevel.INFO
        settings.server.host = "0.0.0.0"
        settings.server.port = 8080
        settings.server.workers = 4

        with (
            patch("app.main.get_settings", return_value=settings),
            patch("uvicorn.run") as uvicorn_run,
        ):
            run()

        uvicorn_run.assert_called_once_with(
            "app.main:create_app",
            factory=True,
            host="0.0.0.0",
            port=8080,
            reload=False,
            workers=4,
            log_level="info",
        )
