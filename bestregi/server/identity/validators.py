"""
Password and user validation rules driven by ``IdentityOptions``.
"""

from __future__ import annotations

from typing import List, Optional

from bestregi.server.core.config import PasswordOptions, UserOptions

from .results import IdentityError


class PasswordValidator:
    """Check a candidate password against the configured strength rules."""

    def __init__(self, options: PasswordOptions) -> None:
        self.options = options

    def validate(self, password: Optional[str]) -> List[IdentityError]:
        password = password or ""
        options = self.options
        errors: List[IdentityError] = []

        if len(password) < options.required_length:
            errors.append(
                IdentityError(
                    "PasswordTooShort", f"Passwords must be at least {options.required_length} characters."
                )
            )
        if options.require_non_alphanumeric and all(c.isalnum() for c in password):
            errors.append(
                IdentityError(
                    "PasswordRequiresNonAlphanumeric", "Passwords must have at least one non alphanumeric character."
                )
            )
        if options.require_digit and not any(c.isdigit() for c in password):
            errors.append(IdentityError("PasswordRequiresDigit", "Passwords must have at least one digit ('0'-'9')."))
        if options.require_lowercase and not any(c.islower() for c in password):
            errors.append(
                IdentityError("PasswordRequiresLower", "Passwords must have at least one lowercase ('a'-'z').")
            )
        if options.require_uppercase and not any(c.isupper() for c in password):
            errors.append(
                IdentityError("PasswordRequiresUpper", "Passwords must have at least one uppercase ('A'-'Z').")
            )
        if options.required_unique_chars > 1 and len(set(password)) < options.required_unique_chars:
            errors.append(
                IdentityError(
                    "PasswordRequiresUniqueChars",
                    f"Passwords must use at least {options.required_unique_chars} different characters.",
                )
            )
        return errors


def is_valid_email(email: Optional[str]) -> bool:
    """Loose address check: exactly one ``@`` with text on both sides."""
    if not email or email != email.strip():
        return False
    local, sep, domain = email.partition("@")
    return bool(sep and local and domain and "@" not in domain)


class UserValidator:
    """Check user name and email shape; uniqueness is checked by the manager."""

    def __init__(self, options: UserOptions) -> None:
        self.options = options

    def validate(self, user_name: Optional[str], email: Optional[str]) -> List[IdentityError]:
        errors: List[IdentityError] = []
        allowed = self.options.allowed_user_name_characters
        if not user_name or (allowed and any(c not in allowed for c in user_name)):
            errors.append(
                IdentityError(
                    "InvalidUserName", f"Username '{user_name or ''}' is invalid, can only contain letters or digits."
                )
            )
        if self.options.require_unique_email and not is_valid_email(email):
            errors.append(IdentityError("InvalidEmail", f"Email '{email or ''}' is invalid."))
        return errors
