"""Repository module for database operations."""

from .base import BaseRepository
from .resources import ResourceRepository

__all__ = [
    "BaseRepository",
    "ResourceRepository",
]
