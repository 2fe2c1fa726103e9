from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from bestregi.server.core.config import Settings
from bestregi.server.identity.password_hasher import PasswordHasher

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET_KEY = "test-secret-key"


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings backed by an in-memory SQLite database."""

    def _make(environment: str = "Production", **overrides) -> Settings:
        values = {
            "environment": environment,
            "secret_key": TEST_SECRET_KEY,
            "connection_strings": {"BestRegiContextConnection": TEST_DATABASE_URL},
            "https_redirection": {"https_port": 443},
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture(autouse=True)
def fast_password_hasher(monkeypatch: pytest.MonkeyPatch) -> None:
    """Hash with few PBKDF2 iterations so identity flows stay quick."""
    monkeypatch.setattr(
        "bestregi.server.identity.services.PasswordHasher",
        lambda: PasswordHasher(iterations=1_000),
    )


@pytest_asyncio.fixture
async def app(make_settings):
    """A production-mode application with its schema created."""
    from bestregi.server.main import create_app

    application = create_app(make_settings())
    db_context = application.state.services.get("db_context")
    # ASGITransport does not run the lifespan
    await db_context.ensure_created()
    yield application
    await db_context.dispose()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTPS client against the application; redirects are not followed."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://bestregi.test") as http_client:
        yield http_client
