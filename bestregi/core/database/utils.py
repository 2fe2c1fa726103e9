"""
Database utility functions for engine and session management.

Functions:
- normalize_database_url: Rewrites connection strings to their async drivers
- create_engine: Creates async SQLAlchemy engine with URL normalization
- create_sessionmaker: Creates async session factory with safe defaults
- create_all: Creates all tables from ORM metadata
"""

from __future__ import annotations

import re

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from .base import Base

_ASYNC_DRIVERS = (
    (re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://"), "postgresql+asyncpg://"),
    (re.compile(r"^sqlite(?:\+[a-z0-9_]+)?://"), "sqlite+aiosqlite://"),
    (re.compile(r"^mssql(?:\+[a-z0-9_]+)?://"), "mssql+aioodbc://"),
)


def normalize_database_url(db_url: str) -> str:
    """Rewrite a connection string so that it uses the async driver.

    For example ``postgresql://`` becomes ``postgresql+asyncpg://`` and
    ``sqlite:///app.db`` becomes ``sqlite+aiosqlite:///app.db``. URLs of other
    dialects are returned untouched.

    Args:
        db_url: Database connection URL

    Returns:
        URL with the async driver selected
    """
    url = db_url.strip()
    for pattern, replacement in _ASYNC_DRIVERS:
        if pattern.match(url):
            return pattern.sub(replacement, url, count=1)
    return url


def _is_in_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    In-memory SQLite databases share one connection through ``StaticPool`` so
    every session sees the same tables.

    Args:
        db_url: Database connection URL

    Returns:
        Configured AsyncEngine instance
    """
    url = normalize_database_url(db_url)
    if _is_in_memory_sqlite(url):
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_async_engine(url, connect_args={"check_same_thread": False})
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project.

    Args:
        engine: Async SQLAlchemy engine

    Returns:
        Configured async session factory producing SQLModel sessions
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata.

    Args:
        engine: Async SQLAlchemy engine
    """
    # Entities register themselves on import
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
