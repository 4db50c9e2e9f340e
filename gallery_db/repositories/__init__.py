"""
GALLERY_DB repositories.

Usage:
    from gallery_db.repositories import ImageRepository, UserRepository

    images = ImageRepository(manager)
    users = UserRepository(manager)
"""

from .base import BaseRepository, Entity
from .images import ImageRepository
from .models import Image, User
from .users import UserRepository

__all__ = [
    "Entity",
    "BaseRepository",
    "Image",
    "User",
    "ImageRepository",
    "UserRepository",
]
