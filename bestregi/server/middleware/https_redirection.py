"""
HTTPS redirection middleware.

Plain HTTP requests are redirected to the same URL on the HTTPS port. When
no port is configured the middleware cannot build the target and lets the
request through, warning once.
"""

from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)


class HttpsRedirectionMiddleware(BaseHTTPMiddleware):
    """Redirect ``http`` requests to ``https``."""

    def __init__(self, app: ASGIApp, https_port: Optional[int] = None, redirect_status_code: int = 307) -> None:
        super().__init__(app)
        self.https_port = https_port
        self.redirect_status_code = redirect_status_code
        self._warned = False

    def redirect_url(self, request: Request) -> str:
        netloc = request.url.hostname or ""
        if ":" in netloc:
            netloc = f"[{netloc}]"
        if self.https_port and self.https_port != 443:
            netloc = f"{netloc}:{self.https_port}"
        return str(request.url.replace(scheme="https", netloc=netloc))

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.scheme != "http":
            return await call_next(request)

        if self.https_port is None:
            if not self._warned:
                logger.warning("Failed to determine the https port for redirect.")
                self._warned = True
            return await call_next(request)

        target = self.redirect_url(request)
        logger.debug(f"Redirecting {request.url} to {target}")
        return RedirectResponse(target, status_code=self.redirect_status_code)
