"""
Identity user repository.

Lookups by normalized user name and email for sign-in and registration.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.identity_users import IdentityUser
from .base import AsyncBaseRepository


class IdentityUserRepository(AsyncBaseRepository[IdentityUser]):
    """Async repository for identity user data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, IdentityUser)

    async def update(self, user: IdentityUser) -> IdentityUser:
        """Persist changes and rotate the concurrency stamp."""
        user.concurrency_stamp = str(uuid.uuid4())
        return await super().update(user)

    async def find_by_normalized_user_name(self, normalized_user_name: str) -> Optional[IdentityUser]:
        """Find a user by upper-cased user name."""
        stmt = select(IdentityUser).where(IdentityUser.normalized_user_name == normalized_user_name)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_by_normalized_email(self, normalized_email: str) -> Optional[IdentityUser]:
        """Find a user by upper-cased email.

        Returns the first match; uniqueness of emails is enforced by the
        user manager, not by the table.
        """
        stmt = select(IdentityUser).where(IdentityUser.normalized_email == normalized_email)
        result = await self.session.exec(stmt)
        return result.first()
