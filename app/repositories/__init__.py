"""
Repository layer for database operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PropertyRepository",
    "PropertySearchFilters",
]
