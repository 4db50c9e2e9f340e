"""
GalleryDB

The entry point of the access layer. It owns one ConnectionManager and the
image and user repositories built on it, and re-exposes their operations.

This module is part of GALLERY_DB.

Usage:
    async with GalleryDB(GalleryConfig(bootstrap=True)) as db:
        user = await db.save_user(User(username="alice", password="s3cret"))
        image = await db.save_image(Image(description="a cat #cute", user_id=user.id))
        await db.like_image(image.public_id)
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from .config import GalleryConfig
from .core import BootstrapReport, ConnectionManager, ConnectionState
from .observability import HealthCheckResult, check_store_health
from .repositories import Image, ImageRepository, User, UserRepository
from .utils import CredentialHasher, IdentifierCodec, TextNormalizer

logger = logging.getLogger(__name__)


class GalleryDB:
    """
    Facade over the connection manager and the repositories.

    Every operation requires a prior connect() and raises NotConnectedError
    otherwise.
    """

    def __init__(self, config: GalleryConfig | None = None, **overrides: Any) -> None:
        """
        Initialize the facade. No I/O happens until connect().

        Args:
            config: Configuration (defaults to GalleryConfig() from the environment)
            **overrides: GalleryConfig keyword arguments, used when config is None
        """
        self._connection = ConnectionManager(config, **overrides)
        self.config = self._connection.config

        self.codec = IdentifierCodec()
        self.normalizer = TextNormalizer()
        self.hasher = CredentialHasher(self.config.password_scheme)

        self.images = ImageRepository(self._connection, self.codec, self.normalizer)
        self.users = UserRepository(self._connection, self.hasher)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def state(self) -> ConnectionState:
        return self._connection.state

    async def connect(self) -> AsyncIOMotorDatabase:
        return await self._connection.connect()

    async def disconnect(self) -> None:
        await self._connection.disconnect()

    async def ensure_schema(self) -> BootstrapReport:
        return await self._connection.ensure_schema()

    async def health_check(self) -> HealthCheckResult:
        return await check_store_health(self._connection)

    async def __aenter__(self) -> "GalleryDB":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._connection.is_connected:
            await self.disconnect()

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def save_image(self, image: Image | dict[str, Any]) -> Image:
        return await self.images.save_image(image)

    async def like_image(self, public_id: str) -> Image:
        return await self.images.like_image(public_id)

    async def get_image(self, public_id: str) -> Image:
        return await self.images.get_image(public_id)

    async def get_images(self) -> list[Image]:
        return await self.images.get_images()

    async def get_images_by_user(self, user_id: str) -> list[Image]:
        return await self.images.get_images_by_user(user_id)

    async def get_images_by_tag(self, tag: str) -> list[Image]:
        return await self.images.get_images_by_tag(tag)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def save_user(self, user: User | dict[str, Any]) -> User:
        return await self.users.save_user(user)

    async def get_user(self, username: str) -> User:
        return await self.users.get_user(username)

    async def authenticate(self, username: str, password: str) -> bool:
        return await self.users.authenticate(username, password)
