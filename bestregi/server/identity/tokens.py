"""
Signed payloads for cookies and one-time tokens.

``DataProtector`` wraps an itsdangerous timed serializer. Each purpose uses
its own salt so an email confirmation token can never be replayed as an
authentication cookie and vice versa.
"""

from __future__ import annotations

from typing import Any, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from bestregi.core.logging_config import get_logger

logger = get_logger(__name__)

AUTHENTICATION_PURPOSE = "bestregi.identity.application"
EMAIL_CONFIRMATION_PURPOSE = "bestregi.identity.email-confirmation"


class DataProtector:
    """Sign and verify JSON-serialisable payloads for one purpose."""

    def __init__(self, secret_key: str, purpose: str) -> None:
        self.purpose = purpose
        self._serializer = URLSafeTimedSerializer(secret_key, salt=purpose)

    def protect(self, payload: Any) -> str:
        return self._serializer.dumps(payload)

    def unprotect(self, token: str, max_age_seconds: Optional[int] = None) -> Optional[Any]:
        """Return the payload, or ``None`` when the token is forged, corrupt or expired."""
        try:
            return self._serializer.loads(token, max_age=max_age_seconds)
        except SignatureExpired:
            logger.debug(f"Expired {self.purpose} token rejected")
            return None
        except BadSignature:
            logger.debug(f"Invalid {self.purpose} token rejected")
            return None
