"""Unit tests for signed tokens and the cookie authentication backend."""

import time
from unittest.mock import Mock

import pytest
from itsdangerous import URLSafeTimedSerializer

from bestregi.server.core.config import CookieOptions
from bestregi.server.identity import IdentityCookieBackend, IdentityPrincipal
from bestregi.server.identity.authentication import build_ticket
from bestregi.server.identity.tokens import AUTHENTICATION_PURPOSE, EMAIL_CONFIRMATION_PURPOSE, DataProtector


class TestDataProtector:
    def test_round_trip(self):
        protector = DataProtector("secret", AUTHENTICATION_PURPOSE)

        assert protector.unprotect(protector.protect({"uid": "1"})) == {"uid": "1"}

    def test_purposes_are_isolated(self):
        token = DataProtector("secret", AUTHENTICATION_PURPOSE).protect({"uid": "1"})

        assert DataProtector("secret", EMAIL_CONFIRMATION_PURPOSE).unprotect(token) is None

    def test_other_key_rejected(self):
        token = DataProtector("secret", AUTHENTICATION_PURPOSE).protect({"uid": "1"})

        assert DataProtector("other", AUTHENTICATION_PURPOSE).unprotect(token) is None

    def test_expired_token_rejected(self):
        serializer = URLSafeTimedSerializer("secret", salt=AUTHENTICATION_PURPOSE)
        token = serializer.dumps({"uid": "1"})
        protector = DataProtector("secret", AUTHENTICATION_PURPOSE)

        assert protector.unprotect(token, max_age_seconds=-1) is None


def _connection(cookies: dict) -> Mock:
    conn = Mock()
    conn.cookies = cookies
    return conn


class TestIdentityCookieBackend:
    @pytest.fixture
    def protector(self):
        return DataProtector("secret", AUTHENTICATION_PURPOSE)

    @pytest.fixture
    def backend(self, protector):
        return IdentityCookieBackend(protector, CookieOptions())

    async def test_no_cookie_is_anonymous(self, backend):
        assert await backend.authenticate(_connection({})) is None

    async def test_valid_ticket(self, backend, protector):
        ticket = build_ticket("u1", "alice", "alice@example.com", "STAMP", False, 3600, roles=("Admin",))
        cookie = protector.protect(ticket)

        credentials, principal = await backend.authenticate(_connection({".BestRegi.Identity": cookie}))

        assert isinstance(principal, IdentityPrincipal)
        assert principal.is_authenticated
        assert principal.identity == "u1"
        assert principal.display_name == "alice"
        assert principal.is_in_role("admin")
        assert credentials.scopes == ["authenticated", "Admin"]

    async def test_expired_ticket(self, backend, protector):
        ticket = build_ticket("u1", "alice", None, "STAMP", False, 3600)
        ticket["exp"] = int(time.time()) - 1

        assert await backend.authenticate(_connection({".BestRegi.Identity": protector.protect(ticket)})) is None

    async def test_tampered_cookie(self, backend):
        assert await backend.authenticate(_connection({".BestRegi.Identity": "not-a-ticket"})) is None
