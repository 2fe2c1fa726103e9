"""Tests for UserManager against an in-memory identity store."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

from starlette.concurrency import run_in_threadpool

from bestregi.core.database.entities import IdentityUser
from bestregi.server.identity import PasswordHasher
from bestregi.server.identity.user_manager import normalize

PASSWORD = "Passw0rd!"


async def _create(user_manager, name="alice@example.com", password=PASSWORD) -> IdentityUser:
    user = IdentityUser(user_name=name, email=name)
    result = await user_manager.create(user, password)
    assert result.succeeded, str(result)
    return user


class TestCreate:
    async def test_create_normalizes_and_hashes(self, user_manager):
        user = await _create(user_manager)

        assert user.normalized_user_name == "ALICE@EXAMPLE.COM"
        assert user.normalized_email == "ALICE@EXAMPLE.COM"
        assert user.password_hash.startswith("pbkdf2_sha256$")
        assert user.email_confirmed is False

    async def test_duplicate_user_name_and_email(self, user_manager):
        await _create(user_manager)

        result = await user_manager.create(IdentityUser(user_name="ALICE@example.com", email="alice@EXAMPLE.com"), PASSWORD)

        assert result.succeeded is False
        assert [e.code for e in result.errors] == ["DuplicateUserName", "DuplicateEmail"]

    async def test_weak_password_rejected(self, user_manager):
        result = await user_manager.create(IdentityUser(user_name="bob", email="bob@example.com"), "short")

        assert result.succeeded is False
        assert "PasswordTooShort" in [e.code for e in result.errors]
        assert await user_manager.find_by_name("bob") is None

    async def test_concurrent_duplicate_name_reported(self, user_manager):
        original_id = (await _create(user_manager)).id
        user_manager.repository.find_by_normalized_user_name = AsyncMock(return_value=None)

        result = await user_manager.create(
            IdentityUser(user_name="alice@example.com", email="other@example.com"), PASSWORD
        )

        assert result.succeeded is False
        assert [e.code for e in result.errors] == ["DuplicateUserName"]
        assert (await user_manager.find_by_id(original_id)).user_name == "alice@example.com"

    async def test_hashing_runs_in_threadpool(self, user_manager):
        with patch(
            "bestregi.server.identity.user_manager.run_in_threadpool", wraps=run_in_threadpool
        ) as mock_threadpool:
            user = await _create(user_manager)
            assert await user_manager.check_password(user, PASSWORD) is True

        called = [c.args[0].__name__ for c in mock_threadpool.call_args_list]
        assert called == ["hash_password", "verify_hashed_password"]


class TestLookup:
    async def test_find_by_name_and_email_ignore_case(self, user_manager):
        user = await _create(user_manager)

        assert (await user_manager.find_by_name("ALICE@example.com")).id == user.id
        assert (await user_manager.find_by_email("Alice@Example.com")).id == user.id
        assert (await user_manager.find_by_id(user.id)).id == user.id

    def test_normalize(self):
        assert normalize("MiXed") == "MIXED"
        assert normalize(None) is None


class TestPasswords:
    async def test_check_password(self, user_manager):
        user = await _create(user_manager)

        assert await user_manager.check_password(user, PASSWORD) is True
        assert await user_manager.check_password(user, "nope") is False

    async def test_outdated_hash_upgraded(self, user_manager):
        user = await _create(user_manager)
        user_manager.password_hasher = PasswordHasher(iterations=2_000)

        assert await user_manager.check_password(user, PASSWORD) is True
        assert user.password_hash.split("$")[1] == "2000"


class TestEmailConfirmation:
    async def test_confirm_with_valid_token(self, user_manager):
        user = await _create(user_manager)
        token = user_manager.generate_email_confirmation_token(user)

        result = await user_manager.confirm_email(user, token)

        assert result.succeeded is True
        assert (await user_manager.find_by_id(user.id)).email_confirmed is True

    async def test_token_for_other_user_rejected(self, user_manager):
        alice = await _create(user_manager)
        bob = await _create(user_manager, name="bob@example.com")
        token = user_manager.generate_email_confirmation_token(alice)

        result = await user_manager.confirm_email(bob, token)

        assert [e.code for e in result.errors] == ["InvalidToken"]
        assert bob.email_confirmed is False

    async def test_token_invalidated_by_security_stamp(self, user_manager):
        user = await _create(user_manager)
        token = user_manager.generate_email_confirmation_token(user)
        user.security_stamp = "ROTATED"

        assert (await user_manager.confirm_email(user, token)).succeeded is False


class TestLockout:
    async def test_locks_after_max_failures(self, user_manager):
        user = await _create(user_manager)

        for _ in range(4):
            await user_manager.access_failed(user)
        assert user_manager.is_locked_out(user) is False
        assert user.access_failed_count == 4

        await user_manager.access_failed(user)

        assert user_manager.is_locked_out(user) is True
        assert user.access_failed_count == 0
        assert user.lockout_end - user.created_at < timedelta(minutes=6)

    async def test_reset_access_failed_count(self, user_manager):
        user = await _create(user_manager)
        await user_manager.access_failed(user)

        await user_manager.reset_access_failed_count(user)

        assert user.access_failed_count == 0
