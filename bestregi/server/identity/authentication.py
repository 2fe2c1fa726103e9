"""
Cookie authentication.

The signed-in user travels in a single cookie holding a signed
authentication ticket. ``IdentityCookieBackend`` plugs into Starlette's
``AuthenticationMiddleware`` and turns a valid ticket into an
``IdentityPrincipal``; anything else leaves the request anonymous.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from starlette.authentication import AuthCredentials, AuthenticationBackend, BaseUser
from starlette.requests import HTTPConnection

from bestregi.core.logging_config import get_logger
from bestregi.server.core.config import CookieOptions

from .tokens import DataProtector

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityPrincipal(BaseUser):
    """The authenticated user as seen by controllers, pages and templates."""

    user_id: str
    user_name: str
    email: Optional[str] = None
    roles: Tuple[str, ...] = ()
    is_persistent: bool = False
    issued_at: int = 0
    expires_at: int = 0
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.user_name

    @property
    def identity(self) -> str:
        return self.user_id

    def is_in_role(self, role: str) -> bool:
        return role.lower() in (r.lower() for r in self.roles)


def build_ticket(
    user_id: str,
    user_name: str,
    email: Optional[str],
    security_stamp: str,
    is_persistent: bool,
    lifetime_seconds: int,
    roles: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    """Ticket payload stored in the authentication cookie."""
    issued_at = int(time.time())
    return {
        "uid": user_id,
        "name": user_name,
        "email": email,
        "roles": list(roles),
        "stamp": security_stamp,
        "persistent": is_persistent,
        "iat": issued_at,
        "exp": issued_at + lifetime_seconds,
    }


class IdentityCookieBackend(AuthenticationBackend):
    """Authenticate requests from the identity cookie."""

    def __init__(self, protector: DataProtector, options: CookieOptions) -> None:
        self.protector = protector
        self.options = options

    async def authenticate(self, conn: HTTPConnection) -> Optional[Tuple[AuthCredentials, BaseUser]]:
        cookie = conn.cookies.get(self.options.name)
        if not cookie:
            return None

        ticket = self.protector.unprotect(cookie, max_age_seconds=self.options.expire_minutes * 60)
        if not isinstance(ticket, dict) or not ticket.get("uid"):
            return None
        if int(ticket.get("exp", 0)) <= int(time.time()):
            logger.debug(f"Expired authentication ticket for {ticket.get('name')!r}")
            return None

        roles = tuple(ticket.get("roles") or ())
        principal = IdentityPrincipal(
            user_id=ticket["uid"],
            user_name=ticket.get("name") or "",
            email=ticket.get("email"),
            roles=roles,
            is_persistent=bool(ticket.get("persistent")),
            issued_at=int(ticket.get("iat", 0)),
            expires_at=int(ticket.get("exp", 0)),
            claims={"security_stamp": ticket.get("stamp")},
        )
        return AuthCredentials(["authenticated", *roles]), principal
