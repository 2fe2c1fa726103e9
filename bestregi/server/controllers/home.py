"""
Home controller: the landing page, the privacy page and the error page.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from starlette.responses import Response

from bestregi.core.logging_config import get_logger
from bestregi.server.mvc import Controller, response_cache

logger = get_logger(__name__)


@dataclass
class ErrorViewModel:
    request_id: Optional[str] = None
    original_path: Optional[str] = None

    @property
    def show_request_id(self) -> bool:
        return bool(self.request_id)


class HomeController(Controller):
    async def index(self) -> Response:
        return self.view()

    async def privacy(self) -> Response:
        return self.view()

    @response_cache(no_store=True)
    async def error(self) -> Response:
        """Rendered by the exception handler after an unhandled exception."""
        request_id = self.request.headers.get("x-request-id") or uuid.uuid4().hex
        feature = getattr(self.request.state, "exception_feature", None)
        model = ErrorViewModel(
            request_id=request_id,
            original_path=feature.path if feature is not None else None,
        )
        if feature is not None:
            logger.info(f"Rendering error page for {feature.path} (request {request_id})")
        return self.view(model=model)
