"""
Sign-in page.
"""

from typing import Optional

from starlette.responses import Response

from bestregi.core.logging_config import get_logger
from bestregi.server.mvc import PageModel

logger = get_logger(__name__)


class LoginModel(PageModel):
    def __init__(self, context) -> None:
        super().__init__(context)
        self.email = ""
        self.return_url: Optional[str] = None

    async def on_get(self, return_url: Optional[str] = None) -> Response:
        self.return_url = return_url
        return self.page()

    async def on_post(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        remember_me: bool = False,
        return_url: Optional[str] = None,
    ) -> Response:
        self.email = email or ""
        self.return_url = return_url
        if not email:
            self.add_error("The Email field is required.", "email")
        if not password:
            self.add_error("The Password field is required.", "password")
        if not self.is_valid:
            return self.page()

        response = self.local_redirect(return_url)
        result = await self.services.sign_in_manager.password_sign_in(
            email, password, is_persistent=remember_me, lockout_on_failure=True, response=response
        )
        if result.succeeded:
            logger.info("User logged in.")
            return response
        if result.is_locked_out:
            logger.warning("User account locked out.")
            return self.redirect_to_page("/Identity/Account/Lockout")

        self.add_error("Invalid login attempt.")
        return self.page()
