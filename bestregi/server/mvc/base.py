"""
Shared behaviour of controllers and page models: access to the request and
services, and the common result helpers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from starlette.authentication import BaseUser
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from .context import ActionContext, RequestServices
from .urls import UrlHelper, is_local_url


class HandlerBase:
    """Base class for anything the dispatcher instantiates."""

    def __init__(self, context: ActionContext) -> None:
        self.context = context
        self.view_data: Dict[str, Any] = {}

    @property
    def request(self) -> Request:
        return self.context.request

    @property
    def services(self) -> RequestServices:
        return self.context.services

    @property
    def route_values(self) -> Dict[str, str]:
        return self.context.route_values

    @property
    def user(self) -> Optional[BaseUser]:
        return self.request.scope.get("user")

    @property
    def url(self) -> UrlHelper:
        return UrlHelper(self.request)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def redirect(self, url: str, status_code: int = 302) -> Response:
        return RedirectResponse(url, status_code=status_code)

    def local_redirect(self, url: Optional[str], fallback: str = "/") -> Response:
        """Redirect to ``url`` only when it is local; otherwise go to ``fallback``."""
        target = url if is_local_url(url) else fallback
        return self.redirect(self.url.content(target or fallback))

    def redirect_to_action(self, action: str, controller: Optional[str] = None, **values: Any) -> Response:
        target = self.url.action(action, controller, **values)
        if target is None:
            raise LookupError(f"No route matches action {action!r} on controller {controller!r}")
        return self.redirect(target)

    def redirect_to_page(self, page: str, **values: Any) -> Response:
        target = self.url.page(page, **values)
        if target is None:
            raise LookupError(f"No page is registered at {page!r}")
        return self.redirect(target)

    def not_found(self) -> Response:
        return Response(status_code=404)

    def bad_request(self, message: str = "") -> Response:
        return PlainTextResponse(message, status_code=400)

    def json(self, data: Any, status_code: int = 200) -> Response:
        return JSONResponse(data, status_code=status_code)

    def content(self, text: str, status_code: int = 200, media_type: str = "text/plain") -> Response:
        return Response(text, status_code=status_code, media_type=media_type)
