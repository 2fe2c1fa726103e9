from typing import AsyncGenerator

import pytest_asyncio
from sqlmodel.ext.asyncio.session import AsyncSession

from bestregi.core.database import BestRegiContext


@pytest_asyncio.fixture
async def db_context() -> AsyncGenerator[BestRegiContext, None]:
    """In-memory persistence context with the schema created."""
    context = BestRegiContext("sqlite:///:memory:")
    await context.ensure_created()
    yield context
    await context.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(db_context: BestRegiContext) -> AsyncGenerator[AsyncSession, None]:
    async with db_context.session() as session:
        yield session
