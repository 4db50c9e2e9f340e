"""
GALLERY_DB - asynchronous MongoDB access layer for images and users.

Owns the connection lifecycle, schema/index bootstrap, image and user CRUD,
tag queries, password digests and short public image identifiers.
"""

from .config import GalleryConfig
from .core import ConnectionManager, ConnectionState, SchemaBootstrapper
from .database import GalleryDB
from .exceptions import (
    ConfigurationError,
    GalleryDBError,
    InsertError,
    InvalidTokenError,
    NotConnectedError,
    NotFoundError,
    StoreConnectionError,
)
from .repositories import Image, ImageRepository, User, UserRepository
from .utils import CredentialHasher, IdentifierCodec, TextNormalizer

__version__ = "0.1.0"

__all__ = [
    # Core
    "GalleryDB",
    "GalleryConfig",
    "ConnectionManager",
    "ConnectionState",
    "SchemaBootstrapper",
    # Repositories
    "Image",
    "User",
    "ImageRepository",
    "UserRepository",
    # Field helpers
    "IdentifierCodec",
    "TextNormalizer",
    "CredentialHasher",
    # Errors
    "GalleryDBError",
    "ConfigurationError",
    "StoreConnectionError",
    "NotConnectedError",
    "InsertError",
    "NotFoundError",
    "InvalidTokenError",
]
