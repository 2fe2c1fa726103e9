"""
User manager.

Creates accounts, verifies passwords, issues and redeems email confirmation
tokens and keeps the lockout counters. Every instance is bound to one
database session, so create one per request.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from bestregi.core.database.base import utc_now
from bestregi.core.database.entities.identity_users import IdentityUser
from bestregi.core.database.repositories.identity_users import IdentityUserRepository
from bestregi.core.logging_config import get_logger
from bestregi.server.core.config import IdentityOptions

from .password_hasher import PasswordHasher, PasswordVerificationResult
from .results import IdentityError, IdentityResult
from .tokens import DataProtector
from .validators import PasswordValidator, UserValidator

logger = get_logger(__name__)


def normalize(value: Optional[str]) -> Optional[str]:
    """Lookup key for user names and emails."""
    if value is None:
        return None
    return value.strip().upper()


class UserManager:
    """Account operations on top of ``IdentityUserRepository``."""

    def __init__(
        self,
        repository: IdentityUserRepository,
        options: IdentityOptions,
        password_hasher: PasswordHasher,
        email_token_protector: DataProtector,
    ) -> None:
        self.repository = repository
        self.options = options
        self.password_hasher = password_hasher
        self.email_token_protector = email_token_protector
        self.password_validator = PasswordValidator(options.password)
        self.user_validator = UserValidator(options.user)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def find_by_id(self, user_id: str) -> Optional[IdentityUser]:
        return await self.repository.get_by_id(user_id)

    async def find_by_name(self, user_name: str) -> Optional[IdentityUser]:
        return await self.repository.find_by_normalized_user_name(normalize(user_name) or "")

    async def find_by_email(self, email: str) -> Optional[IdentityUser]:
        return await self.repository.find_by_normalized_email(normalize(email) or "")

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(self, user: IdentityUser, password: str) -> IdentityResult:
        """Validate and persist a new user with ``password``.

        The account starts unconfirmed.
        """
        errors: List[IdentityError] = []
        errors.extend(self.user_validator.validate(user.user_name, user.email))
        errors.extend(self.password_validator.validate(password))

        user.normalized_user_name = normalize(user.user_name) or ""
        user.normalized_email = normalize(user.email)

        if user.user_name and await self.repository.find_by_normalized_user_name(user.normalized_user_name):
            errors.append(IdentityError("DuplicateUserName", f"Username '{user.user_name}' is already taken."))
        if (
            self.options.user.require_unique_email
            and user.normalized_email
            and await self.repository.find_by_normalized_email(user.normalized_email)
        ):
            errors.append(IdentityError("DuplicateEmail", f"Email '{user.email}' is already taken."))

        if errors:
            logger.info(f"User creation rejected for {user.user_name!r}: {[e.code for e in errors]}")
            return IdentityResult.failed(*errors)

        user.password_hash = await run_in_threadpool(self.password_hasher.hash_password, password)
        user.lockout_enabled = self.options.lockout.allowed_for_new_users
        try:
            await self.repository.create(user)
        except IntegrityError:
            # a concurrent registration took the name between the check and the insert
            await self.repository.session.rollback()
            logger.info(f"User creation lost a race for {user.user_name!r}")
            return IdentityResult.failed(
                IdentityError("DuplicateUserName", f"Username '{user.user_name}' is already taken.")
            )
        logger.info(f"User created: {user.user_name} ({user.id})")
        return IdentityResult.success()

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    async def check_password(self, user: IdentityUser, password: str) -> bool:
        """Verify ``password``; upgrades the stored hash when it is outdated."""
        if not user.password_hash:
            return False
        result = await run_in_threadpool(self.password_hasher.verify_hashed_password, user.password_hash, password)
        if result is PasswordVerificationResult.SUCCESS_REHASH_NEEDED:
            user.password_hash = await run_in_threadpool(self.password_hasher.hash_password, password)
            await self.repository.update(user)
        return result is not PasswordVerificationResult.FAILED

    # ------------------------------------------------------------------
    # Email confirmation
    # ------------------------------------------------------------------

    def generate_email_confirmation_token(self, user: IdentityUser) -> str:
        """Token bound to the user's id, email and current security stamp."""
        return self.email_token_protector.protect(
            {"uid": user.id, "email": user.normalized_email, "stamp": user.security_stamp}
        )

    async def confirm_email(self, user: IdentityUser, token: str) -> IdentityResult:
        max_age = self.options.tokens.email_confirmation_lifespan_hours * 3600
        payload = self.email_token_protector.unprotect(token, max_age_seconds=max_age)
        if (
            not isinstance(payload, dict)
            or payload.get("uid") != user.id
            or payload.get("email") != user.normalized_email
            or payload.get("stamp") != user.security_stamp
        ):
            return IdentityResult.failed(IdentityError("InvalidToken", "Invalid token."))
        user.email_confirmed = True
        await self.repository.update(user)
        logger.info(f"Email confirmed for {user.user_name}")
        return IdentityResult.success()

    # ------------------------------------------------------------------
    # Lockout
    # ------------------------------------------------------------------

    def is_locked_out(self, user: IdentityUser) -> bool:
        return user.is_locked_out(utc_now())

    async def access_failed(self, user: IdentityUser) -> None:
        """Count a failed attempt; lock the account once the limit is reached."""
        user.access_failed_count += 1
        lockout = self.options.lockout
        if user.lockout_enabled and user.access_failed_count >= lockout.max_failed_access_attempts:
            user.lockout_end = utc_now() + timedelta(minutes=lockout.default_lockout_minutes)
            user.access_failed_count = 0
            logger.warning(f"User {user.user_name} locked out until {user.lockout_end.isoformat()}")
        await self.repository.update(user)

    async def reset_access_failed_count(self, user: IdentityUser) -> None:
        if user.access_failed_count == 0:
            return
        user.access_failed_count = 0
        await self.repository.update(user)
