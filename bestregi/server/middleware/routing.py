"""
Routing middleware.

Selects the endpoint for the request and records it on ``request.state`` so
that authorization can inspect it and the dispatcher can run it.
"""

from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from bestregi.core.logging_config import get_logger
from bestregi.server.routing.endpoints import EndpointTable

logger = get_logger(__name__)


class RoutingMiddleware(BaseHTTPMiddleware):
    """Match the request against the endpoint table."""

    def __init__(self, app: ASGIApp, endpoints: EndpointTable) -> None:
        super().__init__(app)
        self.endpoints = endpoints

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        found = self.endpoints.match(request.method, request.url.path)
        if found is None:
            logger.debug(f"No endpoint matches {request.method} {request.url.path}")
            request.state.endpoint = None
            request.state.endpoint_match = None
            request.state.route_values = {}
        else:
            logger.debug(f"{request.method} {request.url.path} -> {found.endpoint.display_name}")
            request.state.endpoint = found.endpoint
            request.state.endpoint_match = found
            request.state.route_values = dict(found.route_values)
        return await call_next(request)
