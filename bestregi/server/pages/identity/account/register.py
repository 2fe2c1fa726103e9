"""
Registration page.

A new account starts unconfirmed. A confirmation link is sent through the
configured email sender and, because sign-in requires a confirmed account,
the user is sent to RegisterConfirmation instead of being signed in.
"""

from typing import Optional

from starlette.responses import Response

from bestregi.core.database.entities.identity_users import IdentityUser
from bestregi.core.logging_config import get_logger
from bestregi.server.mvc import PageModel

logger = get_logger(__name__)

CONFIRM_EMAIL_PAGE = "/Identity/Account/ConfirmEmail"
REGISTER_CONFIRMATION_PAGE = "/Identity/Account/RegisterConfirmation"


def confirmation_link(page: PageModel, user: IdentityUser, return_url: Optional[str] = None) -> str:
    """Absolute ConfirmEmail URL carrying a fresh confirmation code for ``user``."""
    code = page.services.user_manager.generate_email_confirmation_token(user)
    path = page.url.page(CONFIRM_EMAIL_PAGE, user_id=user.id, code=code, return_url=return_url)
    base = page.request.url
    return f"{base.scheme}://{base.netloc}{path}"


class RegisterModel(PageModel):
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
        confirm_password: Optional[str] = None,
        return_url: Optional[str] = None,
    ) -> Response:
        self.email = email or ""
        self.return_url = return_url
        if not email:
            self.add_error("The Email field is required.", "email")
        if not password:
            self.add_error("The Password field is required.", "password")
        elif password != confirm_password:
            self.add_error("The password and confirmation password do not match.", "confirm_password")
        if not self.is_valid:
            return self.page()

        user_manager = self.services.user_manager
        user = IdentityUser(user_name=email, email=email)
        result = await user_manager.create(user, password)
        if not result.succeeded:
            for error in result.errors:
                self.add_error(error.description)
            return self.page()

        logger.info("User created a new account with password.")
        link = confirmation_link(self, user, return_url)
        await self.services.identity.email_sender.send_email(
            email,
            "Confirm your email",
            f'Please confirm your account by <a href="{link}">clicking here</a>.',
        )

        if self.services.identity.options.sign_in.require_confirmed_account:
            return self.redirect_to_page(REGISTER_CONFIRMATION_PAGE, email=email, return_url=return_url)

        response = self.local_redirect(return_url)
        self.services.sign_in_manager.sign_in(response, user)
        return response
