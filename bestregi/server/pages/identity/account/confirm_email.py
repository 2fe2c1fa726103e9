"""
Email confirmation landing page.
"""

from typing import Optional

from starlette.responses import Response

from bestregi.server.mvc import PageModel


class ConfirmEmailModel(PageModel):
    def __init__(self, context) -> None:
        super().__init__(context)
        self.status_message = ""

    async def on_get(self, user_id: Optional[str] = None, code: Optional[str] = None) -> Response:
        if not user_id or not code:
            return self.redirect_to_action("Index", "Home")

        user = await self.services.user_manager.find_by_id(user_id)
        if user is None:
            return self.content(f"Unable to load user with ID '{user_id}'.", status_code=404)

        result = await self.services.user_manager.confirm_email(user, code)
        if result.succeeded:
            self.status_message = "Thank you for confirming your email."
        else:
            self.status_message = "Error confirming your email."
        return self.page()
