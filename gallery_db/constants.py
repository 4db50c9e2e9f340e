"""
Constants for GALLERY_DB.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# CONNECTION DEFAULTS
# ============================================================================

DEFAULT_HOST: Final[str] = "localhost"
"""Default MongoDB host."""

DEFAULT_PORT: Final[int] = 27017
"""Default MongoDB port."""

DEFAULT_DB_NAME: Final[str] = "gallery"
"""Default database name."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

MIN_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 1000
"""Lowest accepted server selection timeout in milliseconds."""

APP_NAME: Final[str] = "GALLERY_DB"
"""Application name reported to the server."""

# ============================================================================
# COLLECTIONS & INDEXES
# ============================================================================

IMAGES_COLLECTION: Final[str] = "images"
USERS_COLLECTION: Final[str] = "users"

COLLECTIONS: Final[tuple[str, ...]] = (IMAGES_COLLECTION, USERS_COLLECTION)
"""Collections created during bootstrap."""

INDEX_IMAGES_CREATED_AT: Final[str] = "created_at"
INDEX_IMAGES_USER_ID: Final[str] = "user_id"
INDEX_IMAGES_TAGS: Final[str] = "tags"
INDEX_USERS_USERNAME: Final[str] = "username"

DEFAULT_INDEX_POLL_INTERVAL: Final[float] = 0.5
"""Seconds between checks while waiting for index builds to finish."""

NAMESPACE_NOT_FOUND: Final[int] = 26
"""Server error code returned when a collection does not exist."""

# ============================================================================
# PUBLIC IDENTIFIERS
# ============================================================================

BASE62_ALPHABET: Final[str] = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
"""Alphabet for public image tokens (URL safe, no padding)."""

OBJECT_ID_TOKEN_LENGTH: Final[int] = 17
"""Token length for a 12-byte ObjectId (62**17 > 2**96)."""

UUID_TOKEN_LENGTH: Final[int] = 22
"""Token length for a 16-byte UUID (62**22 > 2**128)."""

# ============================================================================
# TAGS & CREDENTIALS
# ============================================================================

TAG_MARKER: Final[str] = "#"
"""Character introducing a tag in free text."""

PASSWORD_SCHEME_SHA256: Final[str] = "sha256"
PASSWORD_SCHEME_BCRYPT: Final[str] = "bcrypt"

SUPPORTED_PASSWORD_SCHEMES: Final[tuple[str, ...]] = (
    PASSWORD_SCHEME_SHA256,
    PASSWORD_SCHEME_BCRYPT,
)

DEFAULT_PASSWORD_SCHEME: Final[str] = PASSWORD_SCHEME_SHA256
"""Default digest scheme for stored passwords."""

BCRYPT_PREFIX: Final[str] = "$2"
"""Prefix shared by every bcrypt digest ($2a$, $2b$, $2y$)."""

# ============================================================================
# METRICS
# ============================================================================

MAX_METRICS: Final[int] = 10000
"""Maximum number of metric series kept before evicting the oldest."""
