"""
Sign-in manager.

Decides whether a user may sign in and issues or removes the
authentication cookie. The pre-sign-in checks run before the password is
verified: an unconfirmed account is refused with ``NOT_ALLOWED`` even when
the password is right, and a locked-out account with ``LOCKED_OUT``.
"""

from __future__ import annotations

from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from bestregi.core.database.entities.identity_users import IdentityUser
from bestregi.core.logging_config import get_logger
from bestregi.core.monitoring import log_sign_in
from bestregi.server.core.config import IdentityOptions

from .authentication import build_ticket
from .results import SignInResult
from .tokens import DataProtector
from .user_manager import UserManager

logger = get_logger(__name__)


class SignInManager:
    """Password sign-in and cookie management for one request."""

    def __init__(
        self,
        user_manager: UserManager,
        options: IdentityOptions,
        ticket_protector: DataProtector,
        request: Optional[Request] = None,
    ) -> None:
        self.user_manager = user_manager
        self.options = options
        self.ticket_protector = ticket_protector
        self.request = request

    def can_sign_in(self, user: IdentityUser) -> bool:
        sign_in = self.options.sign_in
        if sign_in.require_confirmed_email and not user.email_confirmed:
            logger.debug(f"User {user.user_name} cannot sign in without a confirmed email.")
            return False
        if sign_in.require_confirmed_account and not user.email_confirmed:
            logger.debug(f"User {user.user_name} cannot sign in without a confirmed account.")
            return False
        return True

    async def check_password_sign_in(
        self, user: IdentityUser, password: str, lockout_on_failure: bool
    ) -> SignInResult:
        """Run the pre-sign-in checks, then verify the password."""
        if not self.can_sign_in(user):
            return SignInResult.not_allowed()
        if self.user_manager.is_locked_out(user):
            return SignInResult.locked_out()

        if await self.user_manager.check_password(user, password):
            await self.user_manager.reset_access_failed_count(user)
            return SignInResult.success()

        if lockout_on_failure:
            await self.user_manager.access_failed(user)
            if self.user_manager.is_locked_out(user):
                return SignInResult.locked_out()
        return SignInResult.failed()

    async def password_sign_in(
        self,
        user_name: str,
        password: str,
        is_persistent: bool = False,
        lockout_on_failure: bool = False,
        response: Optional[Response] = None,
    ) -> SignInResult:
        """Sign in by user name (or email) and password.

        On success the authentication cookie is written to ``response`` when
        one is given.
        """
        user = await self.user_manager.find_by_name(user_name)
        if user is None and "@" in (user_name or ""):
            user = await self.user_manager.find_by_email(user_name)
        if user is None:
            log_sign_in(user_name, "unknown_user")
            return SignInResult.failed()

        result = await self.check_password_sign_in(user, password, lockout_on_failure)
        log_sign_in(user.user_name, result.status.value)
        if result.succeeded and response is not None:
            self.sign_in(response, user, is_persistent)
        return result

    def sign_in(self, response: Response, user: IdentityUser, is_persistent: bool = False) -> str:
        """Write the authentication cookie for ``user`` and return its value."""
        cookie = self.options.cookie
        lifetime = cookie.expire_minutes * 60
        ticket = build_ticket(
            user_id=user.id,
            user_name=user.user_name,
            email=user.email,
            security_stamp=user.security_stamp,
            is_persistent=is_persistent,
            lifetime_seconds=lifetime,
        )
        value = self.ticket_protector.protect(ticket)
        response.set_cookie(
            key=cookie.name,
            value=value,
            max_age=lifetime if is_persistent else None,
            path="/",
            secure=self._secure_cookie(),
            httponly=True,
            samesite="lax",
        )
        logger.info(f"User {user.user_name} signed in (persistent={is_persistent})")
        return value

    def sign_out(self, response: Response) -> None:
        cookie = self.options.cookie
        response.delete_cookie(key=cookie.name, path="/", secure=self._secure_cookie(), httponly=True, samesite="lax")

    def _secure_cookie(self) -> bool:
        if self.options.cookie.secure is not None:
            return self.options.cookie.secure
        return self.request is not None and self.request.url.scheme == "https"
