"""
Helper functions for index management.

Index creation is idempotent: an index is looked up by name before it is
created. wait_for_indexes() blocks until the server reports no index build in
progress on a collection, so queries never run against a half-built index.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from ..constants import (
    DEFAULT_INDEX_POLL_INTERVAL,
    IMAGES_COLLECTION,
    INDEX_IMAGES_CREATED_AT,
    INDEX_IMAGES_TAGS,
    INDEX_IMAGES_USER_ID,
    INDEX_USERS_USERNAME,
    NAMESPACE_NOT_FOUND,
    USERS_COLLECTION,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexDefinition:
    """A secondary index owned by the access layer."""

    collection: str
    name: str
    keys: list[tuple[str, int]]
    options: dict[str, Any] = field(default_factory=dict)


# Array fields such as tags get a multikey index automatically.
MANAGED_INDEXES: tuple[IndexDefinition, ...] = (
    IndexDefinition(IMAGES_COLLECTION, INDEX_IMAGES_CREATED_AT, [("created_at", DESCENDING)]),
    IndexDefinition(IMAGES_COLLECTION, INDEX_IMAGES_USER_ID, [("user_id", ASCENDING)]),
    IndexDefinition(IMAGES_COLLECTION, INDEX_IMAGES_TAGS, [("tags", ASCENDING)]),
    IndexDefinition(
        USERS_COLLECTION, INDEX_USERS_USERNAME, [("username", ASCENDING)], {"unique": True}
    ),
)


def indexes_for(collection_name: str) -> list[IndexDefinition]:
    """Return the managed index definitions of one collection."""
    return [d for d in MANAGED_INDEXES if d.collection == collection_name]


async def list_index_names(collection: AsyncIOMotorCollection) -> list[str]:
    """Return the names of the indexes that exist on a collection."""
    indexes = await collection.list_indexes().to_list(length=None)
    return [idx.get("name") for idx in indexes]


async def ensure_index(collection: AsyncIOMotorCollection, definition: IndexDefinition) -> bool:
    """
    Create an index unless one with the same name already exists.

    Args:
        collection: Target collection
        definition: Index to ensure

    Returns:
        True if the index was created, False if it already existed
    """
    existing = await list_index_names(collection)
    if definition.name in existing:
        logger.debug(f"[{collection.name}] Index '{definition.name}' exists; skipping.")
        return False

    logger.info(
        f"[{collection.name}] Creating index '{definition.name}' on {definition.keys} "
        f"with options {definition.options}..."
    )
    created_name = await collection.create_index(
        definition.keys, name=definition.name, **definition.options
    )
    logger.info(f"[{collection.name}] Created index '{created_name}'.")
    return True


async def building_index_names(collection: AsyncIOMotorCollection) -> list[str]:
    """
    Return the names of indexes whose build has not finished yet.

    A collection that does not exist has nothing to build.
    """
    try:
        result = await collection.database.command(
            {"listIndexes": collection.name, "includeBuildUUIDs": True}
        )
    except OperationFailure as e:
        if e.code == NAMESPACE_NOT_FOUND:
            return []
        raise

    batch = result.get("cursor", {}).get("firstBatch", [])
    return [entry.get("spec", {}).get("name") for entry in batch if "buildUUID" in entry]


async def wait_for_indexes(
    collection: AsyncIOMotorCollection,
    poll_interval: float = DEFAULT_INDEX_POLL_INTERVAL,
) -> None:
    """
    Block until no index build is in progress on the collection.

    There is no timeout; callers wanting one wrap this in asyncio.wait_for().
    """
    while True:
        building = await building_index_names(collection)
        if not building:
            return
        logger.debug(f"[{collection.name}] Waiting for index build(s) to finish: {building}")
        await asyncio.sleep(poll_interval)
