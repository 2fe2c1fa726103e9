"""
Database entities for BestRegi.

Importing this package registers every table with the shared SQLModel
metadata.
"""

from .identity_users import IdentityUser

__all__ = ["IdentityUser"]
