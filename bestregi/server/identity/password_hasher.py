"""
Password hashing.

Hashes are PBKDF2-HMAC-SHA256 with a random 16 byte salt, stored as
``pbkdf2_sha256$<iterations>$<salt>$<hash>`` (base64 salt and hash). The
iteration count travels with the hash so it can be raised later; hashes
produced with fewer iterations verify as ``SUCCESS_REHASH_NEEDED``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from enum import Enum

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 100_000
SALT_SIZE = 16


class PasswordVerificationResult(str, Enum):
    FAILED = "failed"
    SUCCESS = "success"
    SUCCESS_REHASH_NEEDED = "success_rehash_needed"


class PasswordHasher:
    """Hash and verify user passwords."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def hash_password(self, password: str) -> str:
        salt = secrets.token_bytes(SALT_SIZE)
        digest = self._derive(password, salt, self.iterations)
        return "$".join(
            (
                ALGORITHM,
                str(self.iterations),
                base64.b64encode(salt).decode("ascii"),
                base64.b64encode(digest).decode("ascii"),
            )
        )

    def verify_hashed_password(self, hashed_password: str, provided_password: str) -> PasswordVerificationResult:
        try:
            algorithm, iterations_text, salt_text, digest_text = hashed_password.split("$")
            iterations = int(iterations_text)
            salt = base64.b64decode(salt_text, validate=True)
            expected = base64.b64decode(digest_text, validate=True)
        except (AttributeError, ValueError):
            return PasswordVerificationResult.FAILED

        if algorithm != ALGORITHM or iterations < 1:
            return PasswordVerificationResult.FAILED

        actual = self._derive(provided_password, salt, iterations)
        if not hmac.compare_digest(actual, expected):
            return PasswordVerificationResult.FAILED
        if iterations < self.iterations:
            return PasswordVerificationResult.SUCCESS_REHASH_NEEDED
        return PasswordVerificationResult.SUCCESS

    @staticmethod
    def _derive(password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
