"""
Page models.

A page is a module in the ``bestregi.server.pages`` package holding one
``PageModel`` subclass. Its URL comes from the module path and its template
from ``Pages/<route>.html`` unless ``template`` is set. Requests are handled
by ``on_get`` / ``on_post`` (or ``on_post_<handler>`` when the form or
query carries ``handler=<name>``); a page without a matching handler is
simply rendered.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional

from starlette.responses import Response

from .base import HandlerBase


class PageModel(HandlerBase):
    """Base class for pages."""

    route: ClassVar[str] = ""
    template: ClassVar[Optional[str]] = None

    def __init__(self, context) -> None:
        super().__init__(context)
        self.errors: List[str] = []
        self.field_errors: Dict[str, List[str]] = {}

    @property
    def is_valid(self) -> bool:
        return not self.errors and not any(self.field_errors.values())

    def add_error(self, message: str, field: Optional[str] = None) -> None:
        if field is None:
            self.errors.append(message)
        else:
            self.field_errors.setdefault(field, []).append(message)

    def page(self, status_code: int = 200, **context: Any) -> Response:
        """Render this page's template with the page model as ``model``."""
        values: Dict[str, Any] = {"model": self, "view_data": self.view_data}
        values.update(context)
        return self.services.views.render(self.request, self.template_name(), values, status_code=status_code)

    @classmethod
    def template_name(cls) -> str:
        if cls.template:
            return cls.template
        return f"Pages{cls.route.rstrip('/') or '/Index'}.html"
