"""
Result types returned by the identity managers.

Identity operations report expected failures (weak password, duplicate
user name, unconfirmed account) as values instead of raising, so pages can
render the errors next to the form that caused them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


@dataclass(frozen=True)
class IdentityError:
    """A single validation or operation error."""

    code: str
    description: str


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of a user manager operation."""

    succeeded: bool
    errors: List[IdentityError] = field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def __str__(self) -> str:
        if self.succeeded:
            return "Succeeded"
        return "Failed : " + ",".join(error.code for error in self.errors)


class SignInStatus(str, Enum):
    """Why a sign-in attempt ended the way it did."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    LOCKED_OUT = "locked_out"
    NOT_ALLOWED = "not_allowed"


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a sign-in attempt."""

    status: SignInStatus

    @property
    def succeeded(self) -> bool:
        return self.status is SignInStatus.SUCCEEDED

    @property
    def is_locked_out(self) -> bool:
        return self.status is SignInStatus.LOCKED_OUT

    @property
    def is_not_allowed(self) -> bool:
        return self.status is SignInStatus.NOT_ALLOWED

    @classmethod
    def success(cls) -> "SignInResult":
        return cls(SignInStatus.SUCCEEDED)

    @classmethod
    def failed(cls) -> "SignInResult":
        return cls(SignInStatus.FAILED)

    @classmethod
    def locked_out(cls) -> "SignInResult":
        return cls(SignInStatus.LOCKED_OUT)

    @classmethod
    def not_allowed(cls) -> "SignInResult":
        return cls(SignInStatus.NOT_ALLOWED)
