"""
Main Application Entry Point.

``create_app`` is the bootstrapper. It runs once, in a fixed order:

1. load configuration and require the ``BestRegiContextConnection``
   connection string
2. register the persistence context
3. register identity, requiring a confirmed account before sign-in
4. register controllers, views and pages
5. build the FastAPI application
6. outside Development, install the exception handler and HSTS
7. install HTTPS redirection, static files, routing, authentication and
   authorization
8. map the ``default`` controller route and the page routes

``run`` then serves the application with uvicorn until shutdown. A missing
connection string stops the process before any service is registered or
any listener opens.
"""

import secrets
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from bestregi.core.database.context import BestRegiContext
from bestregi.core.logging_config import get_logger, setup_logging
from bestregi.core.monitoring import initialize_logfire

from . import controllers, pages
from .api.v1 import health
from .core import constant
from .core.config import ConfigurationError, IdentityOptions, Settings, get_settings
from .exception_handlers import setup_exception_handlers
from .hosting import CONTROLLERS, DB_CONTEXT, ENDPOINTS, IDENTITY, PAGES, VIEWS, ServiceRegistry
from .identity.services import add_default_identity
from .mvc.dispatch import dispatch_endpoint
from .mvc.views import ViewEngine
from .pipeline import configure_pipeline
from .routing.discovery import ControllerRegistry, PageRegistry
from .routing.endpoints import EndpointTable

logger = get_logger(__name__)

DISPATCH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _require_confirmed_account(options: IdentityOptions) -> None:
    options.sign_in.require_confirmed_account = True


def _resolve_secret_key(settings: Settings) -> str:
    if settings.secret_key:
        return settings.secret_key
    logger.warning(
        "BESTREGI_SECRET_KEY is not set; generated a per-process key. "
        "Authentication cookies will not survive a restart."
    )
    return secrets.token_urlsafe(32)


def register_services(settings: Settings) -> ServiceRegistry:
    """Register the application's services in their fixed order."""
    connection_string = settings.require_connection_string(constant.CONNECTION_STRING_NAME)

    services = ServiceRegistry()
    db_context = services.add(DB_CONTEXT, BestRegiContext(connection_string))
    services.add(
        IDENTITY,
        add_default_identity(
            db_context,
            settings.identity,
            _resolve_secret_key(settings),
            configure=_require_confirmed_account,
        ),
    )
    services.add(CONTROLLERS, ControllerRegistry.discover(controllers))
    services.add(VIEWS, ViewEngine(constant.TEMPLATES_DIR))
    services.add(PAGES, PageRegistry.discover(pages))
    services.add(ENDPOINTS, EndpointTable())
    return services


def map_endpoints(services: ServiceRegistry) -> EndpointTable:
    """Map the default conventional route and the page routes."""
    endpoints: EndpointTable = services.get(ENDPOINTS)
    endpoints.map_controller_route(
        constant.DEFAULT_ROUTE_NAME,
        constant.DEFAULT_ROUTE_PATTERN,
        services.get(CONTROLLERS),
    )
    endpoints.map_pages(services.get(PAGES))
    return endpoints


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Ensures the identity tables exist on startup and disposes the engine on
    shutdown.
    """
    db_context: BestRegiContext = app.state.services.get(DB_CONTEXT)

    # Startup
    logger.info(f"Starting up {constant.PROJECT_NAME} ({app.state.settings.environment})...")
    await db_context.ensure_created()

    yield

    # Shutdown
    logger.info(f"Shutting down {constant.PROJECT_NAME}...")
    await db_context.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; loaded from the configuration sources when omitted.

    Raises:
        ConfigurationError: when the required connection string is missing.
    """
    settings = settings or get_settings()
    services = register_services(settings)

    app = FastAPI(
        title=constant.PROJECT_NAME,
        version=constant.VERSION,
        debug=settings.is_development(),
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    setup_exception_handlers(app)
    configure_pipeline(app, settings, services)
    map_endpoints(services)

    app.include_router(health.router, tags=["health"])
    app.add_route("/{path:path}", dispatch_endpoint, methods=DISPATCH_METHODS, include_in_schema=False)

    initialize_logfire(app, environment=settings.environment, engine=services.get(DB_CONTEXT).engine)
    logger.info(f"Registered services: {', '.join(services.names())}")
    return app


def run() -> None:
    """Bootstrap the application and serve it until shutdown."""
    setup_logging()
    try:
        settings = get_settings()
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical(f"Startup aborted: {e}")
        sys.exit(1)

    logger.info(f"Listening on http://{settings.server_host}:{settings.server_port}")
    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_config=None)
