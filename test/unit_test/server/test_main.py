"""Tests for the application bootstrapper."""

from unittest.mock import MagicMock, patch

import pytest

from bestregi.server.core.config import ConfigurationError, Settings
from bestregi.server.hosting import CONTROLLERS, DB_CONTEXT, ENDPOINTS, IDENTITY, PAGES, VIEWS
from bestregi.server.main import create_app, map_endpoints, register_services, run


class TestRegisterServices:
    """Service registration order and preconditions."""

    def test_missing_connection_string_registers_nothing(self):
        settings = Settings(secret_key="k")

        with patch("bestregi.server.main.ServiceRegistry") as mock_registry:
            with pytest.raises(ConfigurationError, match="BestRegiContextConnection"):
                register_services(settings)

        mock_registry.assert_not_called()

    def test_blank_connection_string_is_missing(self):
        settings = Settings(connection_strings={"BestRegiContextConnection": "  "})

        with pytest.raises(ConfigurationError):
            create_app(settings)

    def test_registration_order(self, make_settings):
        services = register_services(make_settings())

        assert services.names() == [DB_CONTEXT, IDENTITY, CONTROLLERS, VIEWS, PAGES, ENDPOINTS]

    def test_identity_requires_confirmed_account(self, make_settings):
        settings = make_settings(identity={"sign_in": {"require_confirmed_account": False}})

        services = register_services(settings)

        assert services.get(IDENTITY).options.sign_in.require_confirmed_account is True

    def test_connection_string_used_for_context(self, make_settings):
        services = register_services(make_settings())

        assert str(services.get(DB_CONTEXT).engine.url) == "sqlite+aiosqlite:///:memory:"

    def test_missing_secret_key_generates_one(self, make_settings):
        with patch("bestregi.server.main.logger") as mock_logger:
            services = register_services(make_settings(secret_key=None))

        assert IDENTITY in services
        mock_logger.warning.assert_called_once()


class TestMapEndpoints:
    def test_default_route_and_pages(self, make_settings):
        services = register_services(make_settings())

        endpoints = map_endpoints(services)

        assert endpoints.url_for_action("Index", "Home") == "/"
        assert endpoints.url_for_page("/Identity/Account/Login") == "/Identity/Account/Login"


class TestCreateApp:
    def test_app_state(self, app):
        assert app.state.settings.environment == "Production"
        assert app.state.services.names()[0] == DB_CONTEXT
        assert app.debug is False
        assert app.openapi_url is None

    def test_development_debug(self, make_settings):
        assert create_app(make_settings("Development")).debug is True

    def test_logfire_traces_context_engine(self, make_settings):
        with patch("bestregi.server.main.initialize_logfire") as mock_init:
            app = create_app(make_settings())

        engine = app.state.services.get(DB_CONTEXT).engine
        mock_init.assert_called_once_with(app, environment="Production", engine=engine)

    async def test_home_index(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert "<title>Home Page" in response.text

    async def test_unknown_path_404(self, client):
        response = await client.get("/does/not/exist/here")

        assert response.status_code == 404

    async def test_unknown_controller_404(self, client):
        response = await client.get("/Orders")

        assert response.status_code == 404

    async def test_error_page_not_cached(self, client):
        response = await client.get("/Home/Error")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        assert response.headers["pragma"] == "no-cache"


class TestRun:
    """Process entry point."""

    def test_missing_connection_string_exits_before_listening(self):
        with (
            patch("bestregi.server.main.setup_logging"),
            patch("bestregi.server.main.get_settings", return_value=Settings()),
            patch("bestregi.server.main.uvicorn.run") as mock_run,
        ):
            with pytest.raises(SystemExit) as exc_info:
                run()

        assert exc_info.value.code == 1
        mock_run.assert_not_called()

    def test_serves_with_uvicorn(self, make_settings):
        settings = make_settings(server_host="127.0.0.1", server_port=5080)
        app = MagicMock()
        with (
            patch("bestregi.server.main.setup_logging"),
            patch("bestregi.server.main.get_settings", return_value=settings),
            patch("bestregi.server.main.create_app", return_value=app) as mock_create,
            patch("bestregi.server.main.uvicorn.run") as mock_run,
        ):
            run()

        mock_create.assert_called_once_with(settings)
        mock_run.assert_called_once_with(app, host="127.0.0.1", port=5080, log_config=None)
