"""
Sign-out page.
"""

from typing import Optional

from starlette.responses import Response

from bestregi.core.logging_config import get_logger
from bestregi.server.mvc import PageModel

logger = get_logger(__name__)


class LogoutModel(PageModel):
    async def on_post(self, return_url: Optional[str] = None) -> Response:
        response = self.local_redirect(return_url) if return_url else self.page(signed_out=True)
        self.services.sign_in_manager.sign_out(response)
        logger.info("User logged out.")
        return response
