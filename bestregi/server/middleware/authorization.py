"""
Authorization middleware.

Enforces ``@authorize`` on the endpoint chosen by the routing middleware.
Anonymous users are sent to the login page with a return URL; signed-in
users lacking a required role are sent to the access-denied page.
"""

from typing import Callable, Optional
from urllib.parse import urlencode

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from bestregi.core.logging_config import get_logger
from bestregi.server.core.config import CookieOptions
from bestregi.server.routing.endpoints import Endpoint

logger = get_logger(__name__)


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Challenge or forbid requests to protected endpoints."""

    def __init__(self, app: ASGIApp, cookie_options: CookieOptions) -> None:
        super().__init__(app)
        self.cookie_options = cookie_options

    def _redirect(self, path: str, request: Request) -> Response:
        return_url = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        query = urlencode({self.cookie_options.return_url_parameter: return_url})
        return RedirectResponse(f"{path}?{query}", status_code=302)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        endpoint: Optional[Endpoint] = getattr(request.state, "endpoint", None)
        if endpoint is None or not endpoint.requires_authorization:
            return await call_next(request)

        user = request.scope.get("user")
        if user is None or not user.is_authenticated:
            logger.info(f"Challenging anonymous request to {endpoint.display_name}")
            return self._redirect(self.cookie_options.login_path, request)

        roles = endpoint.metadata.roles
        if roles and not any(user.is_in_role(role) for role in roles):
            logger.info(f"Forbidding {user.display_name} from {endpoint.display_name}; requires {list(roles)}")
            return self._redirect(self.cookie_options.access_denied_path, request)

        return await call_next(request)
