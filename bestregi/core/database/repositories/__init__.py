"""
Repositories for the BestRegi database layer.
"""

from .base import AsyncBaseRepository
from .identity_users import IdentityUserRepository

__all__ = ["AsyncBaseRepository", "IdentityUserRepository"]
