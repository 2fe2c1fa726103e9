"""
URL generation for views, controllers and pages.
"""

from __future__ import annotations

from typing import Any, Optional

from starlette.requests import Request

from bestregi.server.hosting import ENDPOINTS


def is_local_url(url: Optional[str]) -> bool:
    """Whether ``url`` stays on this site (``/path`` or ``~/path``, never ``//host``)."""
    if not url:
        return False
    if url.startswith("~/"):
        return True
    if not url.startswith("/"):
        return False
    return len(url) == 1 or url[1] not in ("/", "\\")


class UrlHelper:
    """Build URLs relative to the current request's ambient route values."""

    def __init__(self, request: Request) -> None:
        self.request = request

    @property
    def _endpoints(self):
        return self.request.app.state.services.get(ENDPOINTS)

    @property
    def _ambient(self) -> dict:
        return getattr(self.request.state, "route_values", None) or {}

    def action(self, action: Optional[str] = None, controller: Optional[str] = None, **values: Any) -> Optional[str]:
        """URL of a controller action; missing names default to the current ones."""
        action = action or self._ambient.get("action")
        controller = controller or self._ambient.get("controller")
        if not action or not controller:
            return None
        return self._endpoints.url_for_action(action, controller, **values)

    def page(self, page: str, **values: Any) -> Optional[str]:
        """URL of a page such as ``/Identity/Account/Login``."""
        return self._endpoints.url_for_page(page, **values)

    def content(self, path: str) -> str:
        """Resolve an app-relative ``~/`` path."""
        if path.startswith("~/"):
            return "/" + path[2:]
        return path

    def is_local_url(self, url: Optional[str]) -> bool:
        return is_local_url(url)
