"""
Identity subsystem: accounts, passwords, sign-in and cookie authentication.
"""

from .authentication import IdentityCookieBackend, IdentityPrincipal
from .email_sender import EmailSender, LoggingEmailSender
from .password_hasher import PasswordHasher, PasswordVerificationResult
from .results import IdentityError, IdentityResult, SignInResult, SignInStatus
from .services import IdentityServices, add_default_identity
from .sign_in_manager import SignInManager
from .user_manager import UserManager

__all__ = [
    "EmailSender",
    "IdentityCookieBackend",
    "IdentityError",
    "IdentityPrincipal",
    "IdentityResult",
    "IdentityServices",
    "LoggingEmailSender",
    "PasswordHasher",
    "PasswordVerificationResult",
    "SignInManager",
    "SignInResult",
    "SignInStatus",
    "UserManager",
    "add_default_identity",
]
