"""
MVC controllers.

Subclass ``Controller`` with a name ending in ``Controller``; every public
coroutine method becomes an action named after the method in PascalCase
(``privacy`` → ``Privacy``). Views are resolved as
``<Controller>/<Action>.html``.
"""

from __future__ import annotations

from typing import Any, Optional

from starlette.responses import Response

from .base import HandlerBase


class Controller(HandlerBase):
    """Base class for controllers handled by the conventional route."""

    @property
    def controller_name(self) -> str:
        return self.route_values.get("controller", "")

    @property
    def action_name(self) -> str:
        return self.route_values.get("action", "")

    def view(
        self,
        view_name: Optional[str] = None,
        model: Any = None,
        status_code: int = 200,
    ) -> Response:
        """Render ``view_name`` (the current action by default) with ``model``."""
        views = self.services.views
        template = views.find_view(self.controller_name, view_name or self.action_name)
        context = {"model": model, "view_data": self.view_data}
        return views.render(self.request, template, context, status_code=status_code)
