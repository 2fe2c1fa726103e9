"""
View rendering with Jinja2.

Controller views live under ``templates/<Controller>/<View>.html`` with a
fallback to ``templates/Shared/<View>.html``; page templates live under
``templates/Pages/``. Every template receives ``request``, ``url`` (a
``UrlHelper``), ``user`` and whatever the handler passes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from fastapi.templating import Jinja2Templates
from jinja2 import TemplateNotFound
from starlette.requests import Request
from starlette.responses import Response

from bestregi.core.logging_config import get_logger

from .urls import UrlHelper

logger = get_logger(__name__)


class ViewNotFoundError(LookupError):
    """Raised when no template exists for a requested view."""


class ViewEngine:
    """Locate and render templates."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self.templates = Jinja2Templates(directory=str(self.directory))

    def exists(self, template_name: str) -> bool:
        try:
            self.templates.env.get_template(template_name)
        except TemplateNotFound:
            return False
        return True

    def find_view(self, controller: str, view_name: str) -> str:
        searched: List[str] = [f"{controller}/{view_name}.html", f"Shared/{view_name}.html"]
        for candidate in searched:
            if self.exists(candidate):
                return candidate
        raise ViewNotFoundError(f"The view '{view_name}' was not found. Searched: {', '.join(searched)}")

    def render(
        self,
        request: Request,
        template_name: str,
        context: Optional[Mapping[str, Any]] = None,
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        values: Dict[str, Any] = {
            "url": UrlHelper(request),
            "user": request.scope.get("user"),
        }
        values.update(context or {})
        logger.debug(f"Rendering {template_name} ({status_code})")
        return self.templates.TemplateResponse(
            request,
            template_name,
            values,
            status_code=status_code,
            headers=dict(headers) if headers else None,
        )
