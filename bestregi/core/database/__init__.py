"""
Database layer for BestRegi.

Structure:
- base.py: SQLModel base class shared by all entities
- entities/: Database entity models
- repositories/: Data access layer
- context.py: ``BestRegiContext``, the persistence context registered at startup
- utils.py: Engine, session factory and schema helpers
"""

from .base import Base
from .context import BestRegiContext
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
    normalize_database_url,
)

__all__ = [
    "Base",
    "BestRegiContext",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "normalize_database_url",
]
