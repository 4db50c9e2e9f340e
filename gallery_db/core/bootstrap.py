"""
Schema bootstrap for GALLERY_DB.

Ensures the database, the images and users collections, and their secondary
indexes exist. Every step checks before it creates, so running the bootstrap
against an already prepared database changes nothing.
"""

import logging
from dataclasses import dataclass, field

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import CollectionInvalid

from ..constants import COLLECTIONS
from ..indexes import ensure_index, indexes_for, wait_for_indexes

logger = logging.getLogger(__name__)


@dataclass
class BootstrapReport:
    """What a bootstrap run created."""

    database_created: bool = False
    collections_created: list[str] = field(default_factory=list)
    indexes_created: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(
            self.database_created or self.collections_created or self.indexes_created
        )


class SchemaBootstrapper:
    """
    Creates the collections and indexes the repositories rely on.

    Example:
        report = await SchemaBootstrapper(client, "gallery").ensure()
    """

    def __init__(self, client: AsyncIOMotorClient, db_name: str) -> None:
        self._client = client
        self._db_name = db_name

    async def ensure(self) -> BootstrapReport:
        """
        Run the bootstrap.

        Returns:
            BootstrapReport listing what was created

        Raises:
            pymongo.errors.PyMongoError: On any driver failure
        """
        report = BootstrapReport()
        log_prefix = f"[{self._db_name}]"

        database_names = await self._client.list_database_names()
        if self._db_name not in database_names:
            # MongoDB materializes the database with its first collection
            logger.info(f"{log_prefix} Database does not exist yet; creating it.")
            report.database_created = True

        db = self._client[self._db_name]
        existing = await db.list_collection_names()
        for name in COLLECTIONS:
            if name in existing:
                continue
            try:
                await db.create_collection(name)
                report.collections_created.append(name)
                logger.info(f"{log_prefix} Created collection '{name}'.")
            except CollectionInvalid:
                logger.info(f"{log_prefix} Collection '{name}' was created concurrently.")

        for name in COLLECTIONS:
            collection = db[name]
            for definition in indexes_for(name):
                if await ensure_index(collection, definition):
                    report.indexes_created.append(f"{name}.{definition.name}")

        for name in COLLECTIONS:
            await wait_for_indexes(db[name])

        logger.info(
            f"{log_prefix} Bootstrap complete "
            f"(collections created: {report.collections_created or 'none'}, "
            f"indexes created: {report.indexes_created or 'none'})"
        )
        return report
