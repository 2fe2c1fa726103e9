"""
Identity user entity model.

This module contains the database entity backing the identity store: one
row per registered account with its credentials, confirmation state and
lockout bookkeeping.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field

from ..base import Base, UtcDateTime, utc_now


def _new_stamp() -> str:
    return uuid.uuid4().hex.upper()


class IdentityUser(Base, table=True):
    """Entity for registered user accounts.

    ``normalized_user_name`` and ``normalized_email`` hold the upper-cased
    values used for lookups so that sign-in is case-insensitive.

    Table: identity_users
    """

    __tablename__ = "identity_users"
    __table_args__ = ({"extend_existing": True},)

    # Primary identifiers
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=64)
    user_name: str = Field(max_length=256)
    normalized_user_name: str = Field(max_length=256, unique=True, index=True)

    # Contact details
    email: Optional[str] = Field(default=None, max_length=256)
    normalized_email: Optional[str] = Field(default=None, max_length=256, index=True)
    email_confirmed: bool = Field(default=False)
    phone_number: Optional[str] = Field(default=None, max_length=64)

    # Credentials
    password_hash: Optional[str] = Field(default=None)
    security_stamp: str = Field(default_factory=_new_stamp, max_length=64)
    concurrency_stamp: str = Field(default_factory=lambda: str(uuid.uuid4()), max_length=64)

    # Lockout
    lockout_enabled: bool = Field(default=True)
    lockout_end: Optional[datetime] = Field(default=None, sa_type=UtcDateTime)
    access_failed_count: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UtcDateTime)

    def is_locked_out(self, now: Optional[datetime] = None) -> bool:
        """Whether the account is locked out at ``now`` (aware UTC)."""
        if not self.lockout_enabled or self.lockout_end is None:
            return False
        lockout_end = self.lockout_end
        if lockout_end.tzinfo is None:
            lockout_end = lockout_end.replace(tzinfo=timezone.utc)
        return lockout_end > (now or utc_now())

    def __repr__(self) -> str:
        return f"IdentityUser(id={self.id}, user_name={self.user_name}, email_confirmed={self.email_confirmed})"
