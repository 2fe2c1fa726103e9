"""
Middleware modules for the BestRegi server.

Each stage of the request pipeline lives in its own module. The bootstrapper
installs them through ``bestregi.server.pipeline`` in a fixed order.
"""

from .authorization import AuthorizationMiddleware
from .exception_handler import ExceptionHandlerMiddleware
from .hsts import HstsMiddleware
from .https_redirection import HttpsRedirectionMiddleware
from .routing import RoutingMiddleware
from .static_files import StaticFilesMiddleware

__all__ = [
    "AuthorizationMiddleware",
    "ExceptionHandlerMiddleware",
    "HstsMiddleware",
    "HttpsRedirectionMiddleware",
    "RoutingMiddleware",
    "StaticFilesMiddleware",
]
