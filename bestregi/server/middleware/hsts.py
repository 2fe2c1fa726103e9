"""
HTTP Strict Transport Security middleware.
"""

from typing import Callable, Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def build_header_value(max_age_days: int, include_subdomains: bool = False, preload: bool = False) -> str:
    """``max-age=2592000; includeSubDomains; preload``."""
    value = f"max-age={max_age_days * SECONDS_PER_DAY}"
    if include_subdomains:
        value += "; includeSubDomains"
    if preload:
        value += "; preload"
    return value


class HstsMiddleware(BaseHTTPMiddleware):
    """Add ``Strict-Transport-Security`` to HTTPS responses for non-excluded hosts."""

    def __init__(
        self,
        app: ASGIApp,
        max_age_days: int = 30,
        include_subdomains: bool = False,
        preload: bool = False,
        excluded_hosts: Iterable[str] = ("localhost", "127.0.0.1", "[::1]"),
    ) -> None:
        super().__init__(app)
        self.header_value = build_header_value(max_age_days, include_subdomains, preload)
        self.excluded_hosts = {host.lower() for host in excluded_hosts}

    def is_excluded(self, host: str) -> bool:
        return host.lower() in self.excluded_hosts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        host = request.url.hostname or ""
        if ":" in host:
            host = f"[{host}]"
        if request.url.scheme == "https" and not self.is_excluded(host):
            response.headers["Strict-Transport-Security"] = self.header_value
        return response
