from typing import AsyncGenerator

import pytest
import pytest_asyncio

from bestregi.core.database import BestRegiContext
from bestregi.server.core.config import IdentityOptions
from bestregi.server.identity import IdentityServices, PasswordHasher

SECRET_KEY = "identity-test-secret"
STRONG_PASSWORD = "Passw0rd!"


@pytest.fixture
def identity_options() -> IdentityOptions:
    options = IdentityOptions()
    options.sign_in.require_confirmed_account = True
    return options


@pytest_asyncio.fixture
async def db_context() -> AsyncGenerator[BestRegiContext, None]:
    context = BestRegiContext("sqlite+aiosqlite:///:memory:")
    await context.ensure_created()
    yield context
    await context.dispose()


@pytest.fixture
def identity(db_context, identity_options) -> IdentityServices:
    return IdentityServices(db_context, identity_options, SECRET_KEY, password_hasher=PasswordHasher(iterations=1_000))


@pytest_asyncio.fixture
async def session(db_context):
    async with db_context.session() as db_session:
        yield db_session


@pytest.fixture
def user_manager(identity, session):
    return identity.user_manager(session)


@pytest.fixture
def sign_in_manager(identity, user_manager):
    return identity.sign_in_manager(user_manager)
