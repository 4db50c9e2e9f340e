"""
Repository building blocks.

Entity maps dataclass records to MongoDB documents and back. BaseRepository
holds the injected ConnectionManager and resolves a collection per call, so
every operation fails fast with NotConnectedError when there is no live
connection.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import WriteError

from ..core.connection import ConnectionManager
from ..exceptions import InsertError, NotFoundError
from ..observability import get_logger as get_contextual_logger

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


@dataclass
class Entity:
    """
    Base class for stored records.

    Unknown document keys are kept in ``extra`` and written back flattened,
    so caller-supplied fields survive a round trip.

    Example:
        @dataclass
        class Album(Entity):
            title: str = ""
    """

    id: str | None = None
    created_at: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to a document for storage."""
        data: dict[str, Any] = dict(self.extra)
        for f in dataclasses.fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "id":
                data["_id"] = ObjectId(value) if ObjectId.is_valid(value) else value
            else:
                data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None):
        """Create entity from a document (e.g., from the database)."""
        if data is None:
            return None

        data = dict(data)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))

        field_names = {f.name for f in dataclasses.fields(cls)} - {"extra"}
        known = {k: v for k, v in data.items() if k in field_names}
        extra = {k: v for k, v in data.items() if k not in field_names}
        return cls(**known, extra=extra)


T = TypeVar("T", bound=Entity)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseRepository(Generic[T]):
    """
    Shared plumbing for the image and user repositories.

    Subclasses set ``collection_name`` and ``entity_class``.
    """

    collection_name: str
    entity_class: type[T]

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    @property
    def collection(self) -> AsyncIOMotorCollection:
        """
        The backing collection.

        Raises:
            NotConnectedError: If the connection is not established
        """
        return self._connection.database[self.collection_name]

    def _to_entity(self, doc: dict[str, Any] | None) -> T | None:
        if doc is None:
            return None
        return self.entity_class.from_dict(doc)

    def _coerce(self, record: T | dict[str, Any]) -> T:
        if isinstance(record, self.entity_class):
            return record
        if isinstance(record, dict):
            return self.entity_class.from_dict(record)
        raise TypeError(
            f"Expected {self.entity_class.__name__} or dict, got {type(record).__name__}"
        )

    async def _insert(self, collection: AsyncIOMotorCollection, entity: T) -> Any:
        """
        Insert an entity and assign the generated id onto it.

        Raises:
            InsertError: If the store rejects the write
        """
        doc = entity.to_dict()
        doc.pop("_id", None)
        try:
            result = await collection.insert_one(doc)
        except WriteError as e:
            first_error = (e.details or {}).get("errmsg", str(e))
            contextual_logger.warning(
                "Insert rejected",
                extra={"collection": self.collection_name, "error": first_error},
            )
            raise InsertError(
                first_error, collection=self.collection_name, first_error=first_error
            ) from e

        entity.id = str(result.inserted_id)
        logger.debug(f"Added {self.entity_class.__name__} with id={entity.id}")
        return result.inserted_id

    async def _fetch(self, collection: AsyncIOMotorCollection, object_id: Any) -> T:
        """
        Read one record by internal id.

        Raises:
            NotFoundError: If no record has that id
        """
        doc = await collection.find_one({"_id": object_id})
        if doc is None:
            raise NotFoundError(
                f"{self.entity_class.__name__.lower()} {object_id} not found",
                collection=self.collection_name,
                key=str(object_id),
            )
        return self._to_entity(doc)
