"""
Persistence context for BestRegi.

``BestRegiContext`` owns the async engine and session factory created from
the application's connection string. The bootstrapper registers exactly one
instance per application; request handlers borrow sessions from it.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from bestregi.core.logging_config import get_logger

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)


class BestRegiContext:
    """Database-backed persistence context.

    The engine is created eagerly but SQLAlchemy does not connect until the
    first statement runs, so constructing the context never touches the
    database.
    """

    def __init__(self, connection_string: str) -> None:
        self.connection_string = connection_string
        self.engine: AsyncEngine = create_engine(connection_string)
        self.session_factory: async_sessionmaker[AsyncSession] = create_sessionmaker(self.engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session for the duration of a request or unit of work."""
        async with self.session_factory() as session:
            yield session

    async def ensure_created(self) -> None:
        """Create the identity tables when they do not exist yet."""
        await create_all(self.engine)
        logger.info(f"Database schema ensured for {self.engine.url.render_as_string(hide_password=True)}")

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()

    def __repr__(self) -> str:
        return f"BestRegiContext(url={self.engine.url.render_as_string(hide_password=True)})"
