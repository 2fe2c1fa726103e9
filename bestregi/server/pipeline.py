"""
Request pipeline assembly.

The pipeline is declared outermost stage first and installed on the FastAPI
application in reverse, since ``add_middleware`` wraps whatever was added
before it. Outside Development the exception handler and HSTS stages are
prepended; the endpoint dispatcher is always the terminal stage.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from fastapi import FastAPI
from starlette.middleware.authentication import AuthenticationMiddleware

from bestregi.core.logging_config import get_logger

from .core import constant
from .core.config import Settings
from .hosting import ENDPOINTS, IDENTITY, ServiceRegistry
from .middleware import (
    AuthorizationMiddleware,
    ExceptionHandlerMiddleware,
    HstsMiddleware,
    HttpsRedirectionMiddleware,
    RoutingMiddleware,
    StaticFilesMiddleware,
)

logger = get_logger(__name__)

# Stage names recorded on app.state.pipeline
EXCEPTION_HANDLER = "exception_handler"
HSTS = "hsts"
HTTPS_REDIRECTION = "https_redirection"
STATIC_FILES = "static_files"
ROUTING = "routing"
AUTHENTICATION = "authentication"
AUTHORIZATION = "authorization"
ENDPOINT_DISPATCH = "endpoint_dispatch"


@dataclass
class PipelineStage:
    """One middleware and the options it is constructed with."""

    name: str
    middleware_class: type
    options: Dict[str, Any] = field(default_factory=dict)


def build_pipeline(settings: Settings, services: ServiceRegistry) -> List[PipelineStage]:
    """Declare the middleware stages for ``settings``, outermost first."""
    stages: List[PipelineStage] = []

    if not settings.is_development():
        hsts = settings.hsts
        stages.append(
            PipelineStage(EXCEPTION_HANDLER, ExceptionHandlerMiddleware, {"error_path": constant.ERROR_HANDLER_PATH})
        )
        stages.append(
            PipelineStage(
                HSTS,
                HstsMiddleware,
                {
                    "max_age_days": hsts.max_age_days,
                    "include_subdomains": hsts.include_subdomains,
                    "preload": hsts.preload,
                    "excluded_hosts": list(hsts.excluded_hosts),
                },
            )
        )

    identity = services.get(IDENTITY)
    stages.extend(
        [
            PipelineStage(
                HTTPS_REDIRECTION,
                HttpsRedirectionMiddleware,
                {
                    "https_port": settings.https_redirection.https_port,
                    "redirect_status_code": settings.https_redirection.redirect_status_code,
                },
            ),
            PipelineStage(STATIC_FILES, StaticFilesMiddleware, {"directory": settings.web_root}),
            PipelineStage(ROUTING, RoutingMiddleware, {"endpoints": services.get(ENDPOINTS)}),
            PipelineStage(AUTHENTICATION, AuthenticationMiddleware, {"backend": identity.authentication_backend()}),
            PipelineStage(AUTHORIZATION, AuthorizationMiddleware, {"cookie_options": identity.options.cookie}),
        ]
    )
    return stages


def configure_pipeline(app: FastAPI, settings: Settings, services: ServiceRegistry) -> List[str]:
    """Install the pipeline on ``app`` and record its stage names on ``app.state.pipeline``."""
    stages = build_pipeline(settings, services)
    for stage in reversed(stages):
        app.add_middleware(stage.middleware_class, **stage.options)

    names = [stage.name for stage in stages] + [ENDPOINT_DISPATCH]
    app.state.pipeline = names
    logger.info(f"Request pipeline ({settings.environment}): {' -> '.join(names)}")
    return names
