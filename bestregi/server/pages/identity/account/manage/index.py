"""
Account overview for the signed-in user.
"""

from typing import Optional

from starlette.responses import Response

from bestregi.core.database.entities.identity_users import IdentityUser
from bestregi.server.mvc import PageModel, authorize


@authorize
class IndexModel(PageModel):
    def __init__(self, context) -> None:
        super().__init__(context)
        self.account: Optional[IdentityUser] = None

    async def on_get(self) -> Response:
        self.account = await self.services.user_manager.find_by_id(self.user.identity)
        if self.account is None:
            return self.content(f"Unable to load user with ID '{self.user.identity}'.", status_code=404)
        return self.page()
