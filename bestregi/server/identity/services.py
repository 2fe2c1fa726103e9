"""
Identity service registration.

``IdentityServices`` is what the bootstrapper registers for the identity
subsystem: the options, the password hasher, the data protectors and the
email sender, all backed by the application's ``BestRegiContext``. Per-request
managers are created from it with a database session.
"""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.requests import Request

from bestregi.core.database.context import BestRegiContext
from bestregi.core.database.repositories.identity_users import IdentityUserRepository
from bestregi.server.core.config import IdentityOptions

from .authentication import IdentityCookieBackend
from .email_sender import EmailSender, LoggingEmailSender
from .password_hasher import PasswordHasher
from .sign_in_manager import SignInManager
from .tokens import AUTHENTICATION_PURPOSE, EMAIL_CONFIRMATION_PURPOSE, DataProtector
from .user_manager import UserManager


class IdentityServices:
    """Singleton identity services shared by all requests."""

    def __init__(
        self,
        context: BestRegiContext,
        options: IdentityOptions,
        secret_key: str,
        password_hasher: Optional[PasswordHasher] = None,
        email_sender: Optional[EmailSender] = None,
    ) -> None:
        self.context = context
        self.options = options
        self.password_hasher = password_hasher or PasswordHasher()
        self.email_sender: EmailSender = email_sender or LoggingEmailSender()
        self.ticket_protector = DataProtector(secret_key, AUTHENTICATION_PURPOSE)
        self.email_token_protector = DataProtector(secret_key, EMAIL_CONFIRMATION_PURPOSE)

    def authentication_backend(self) -> IdentityCookieBackend:
        return IdentityCookieBackend(self.ticket_protector, self.options.cookie)

    def user_manager(self, session: AsyncSession) -> UserManager:
        return UserManager(
            IdentityUserRepository(session),
            self.options,
            self.password_hasher,
            self.email_token_protector,
        )

    def sign_in_manager(self, user_manager: UserManager, request: Optional[Request] = None) -> SignInManager:
        return SignInManager(user_manager, self.options, self.ticket_protector, request)


def add_default_identity(
    context: BestRegiContext,
    options: IdentityOptions,
    secret_key: str,
    configure: Optional[Callable[[IdentityOptions], None]] = None,
    email_sender: Optional[EmailSender] = None,
) -> IdentityServices:
    """Create the identity services, letting ``configure`` adjust a copy of the options."""
    resolved = options.model_copy(deep=True)
    if configure is not None:
        configure(resolved)
    return IdentityServices(context, resolved, secret_key, email_sender=email_sender)
