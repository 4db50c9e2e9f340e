"""
Image repository.

Images are written in three sequential steps because the public token is
derived from the identifier the store assigns on insert:

    insert -> set public_id = encode(_id) -> re-read

Listing queries return newest first.
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import DESCENDING

from ..constants import IMAGES_COLLECTION
from ..core.connection import ConnectionManager
from ..exceptions import NotFoundError
from ..indexes import wait_for_indexes
from ..observability import timed_operation
from ..utils.ids import IdentifierCodec
from ..utils.text import TextNormalizer
from .base import BaseRepository, utcnow
from .models import Image

logger = logging.getLogger(__name__)

# _id only breaks ties between equal timestamps
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class ImageRepository(BaseRepository[Image]):
    """
    CRUD and queries for the images collection.

    Example:
        images = ImageRepository(manager)
        saved = await images.save_image(Image(description="a cat #cute", user_id=uid))
        await images.like_image(saved.public_id)
    """

    collection_name = IMAGES_COLLECTION
    entity_class = Image

    def __init__(
        self,
        connection: ConnectionManager,
        codec: IdentifierCodec | None = None,
        normalizer: TextNormalizer | None = None,
    ) -> None:
        super().__init__(connection)
        self._codec = codec or IdentifierCodec()
        self._normalizer = normalizer or TextNormalizer()

    async def _find_newest_first(
        self, collection: AsyncIOMotorCollection, query: dict[str, Any]
    ) -> list[Image]:
        cursor = collection.find(query).sort(NEWEST_FIRST)
        docs = await cursor.to_list(length=None)
        return [self._to_entity(doc) for doc in docs]

    @timed_operation("images.save")
    async def save_image(self, image: Image | dict[str, Any]) -> Image:
        """
        Store a new image.

        Sets ``created_at`` and ``tags``, inserts the record, derives
        ``public_id`` from the generated id and returns the stored record.
        The generated id is also assigned onto ``image``.

        Raises:
            NotConnectedError: If not connected
            InsertError: If the store rejects the insert
        """
        collection = self.collection
        image = self._coerce(image)
        image.created_at = utcnow()
        image.tags = self._normalizer.extract_tags(image.description)
        image.public_id = None

        object_id = await self._insert(collection, image)

        public_id = self._codec.encode(object_id)
        await collection.update_one({"_id": object_id}, {"$set": {"public_id": public_id}})

        return await self._fetch(collection, object_id)

    @timed_operation("images.get")
    async def get_image(self, public_id: str) -> Image:
        """
        Fetch an image by its public token.

        Raises:
            NotConnectedError: If not connected
            InvalidTokenError: If the token cannot be decoded
            NotFoundError: If no image has the decoded id
        """
        collection = self.collection
        object_id = self._codec.decode(public_id)
        return await self._fetch(collection, object_id)

    @timed_operation("images.like")
    async def like_image(self, public_id: str) -> Image:
        """
        Mark an image as liked and add one to its like counter.

        The counter is incremented server-side, so concurrent likes on the
        same image are all counted.

        Raises:
            NotConnectedError: If not connected
            InvalidTokenError: If the token cannot be decoded
            NotFoundError: If the image does not exist
        """
        collection = self.collection
        await self.get_image(public_id)
        object_id = self._codec.decode(public_id)

        result = await collection.update_one(
            {"_id": object_id},
            {"$set": {"liked": True}, "$inc": {"likes": 1}},
        )
        if result.matched_count == 0:
            raise NotFoundError(
                f"image {object_id} not found", collection=self.collection_name, key=public_id
            )

        return await self._fetch(collection, object_id)

    @timed_operation("images.list")
    async def get_images(self) -> list[Image]:
        """Return every image, newest first."""
        collection = self.collection
        return await self._find_newest_first(collection, {})

    @timed_operation("images.list_by_user")
    async def get_images_by_user(self, user_id: str) -> list[Image]:
        """Return the images owned by ``user_id``, newest first."""
        collection = self.collection
        await wait_for_indexes(collection)
        return await self._find_newest_first(collection, {"user_id": user_id})

    @timed_operation("images.list_by_tag")
    async def get_images_by_tag(self, tag: str) -> list[Image]:
        """Return the images carrying ``tag`` (normalized first), newest first."""
        collection = self.collection
        tag = self._normalizer.normalize(tag)
        await wait_for_indexes(collection)
        return await self._find_newest_first(collection, {"tags": tag})
