"""
Shown after registration. Without a real email sender the confirmation
link is displayed on the page.
"""

from typing import Optional

from starlette.responses import Response

from bestregi.server.mvc import PageModel

from .register import confirmation_link


class RegisterConfirmationModel(PageModel):
    def __init__(self, context) -> None:
        super().__init__(context)
        self.email = ""
        self.display_confirm_account_link = False
        self.email_confirmation_url: Optional[str] = None

    async def on_get(self, email: Optional[str] = None, return_url: Optional[str] = None) -> Response:
        if not email:
            return self.redirect_to_action("Index", "Home")

        user = await self.services.user_manager.find_by_email(email)
        if user is None:
            return self.content(f"Unable to load user with email '{email}'.", status_code=404)

        self.email = email
        self.display_confirm_account_link = not self.services.identity.email_sender.delivers_mail
        if self.display_confirm_account_link:
            self.email_confirmation_url = confirmation_link(self, user, return_url)
        return self.page()
