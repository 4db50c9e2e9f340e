"""
Pytest configuration and shared fixtures for GALLERY_DB tests.

This module provides:
- An in-memory stand-in for the Motor client, database, collection and cursor
- Fixtures wiring it into ConnectionManager and GalleryDB
- testcontainers fixtures for integration tests against a real MongoDB
"""

import copy
from types import SimpleNamespace
from typing import Any, AsyncGenerator, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import CollectionInvalid, DuplicateKeyError, OperationFailure

from gallery_db import GalleryConfig, GalleryDB
from gallery_db.core.connection import ConnectionManager
from gallery_db.observability import get_metrics_collector

# ============================================================================
# IN-MEMORY MOTOR STAND-IN
# ============================================================================


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Equality matching; a scalar matches an array field that contains it."""
    for key, expected in query.items():
        if key not in doc:
            return False
        actual = doc[key]
        if isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


class FakeCursor:
    """Subset of AsyncIOMotorCursor used by the repositories."""

    def __init__(self, docs: List[Dict[str, Any]], error: Optional[Exception] = None):
        self._docs = [copy.deepcopy(d) for d in docs]
        self._error = error
        self.sort_spec = None

    def sort(self, spec):
        self.sort_spec = spec
        for key, direction in reversed(spec):
            self._docs.sort(key=lambda d: d.get(key), reverse=direction == -1)
        return self

    def limit(self, n: int):
        if n:
            self._docs = self._docs[:n]
        return self

    async def to_list(self, length=None):
        if self._error:
            raise self._error
        return self._docs if length is None else self._docs[:length]

    async def next(self):
        if self._error:
            raise self._error
        if not self._docs:
            raise StopAsyncIteration
        return self._docs.pop(0)


class FakeCollection:
    """Subset of AsyncIOMotorCollection used by the repositories."""

    def __init__(self, name: str, database: "FakeDatabase"):
        self.name = name
        self.database = database
        self.docs: List[Dict[str, Any]] = []
        self.indexes: List[Dict[str, Any]] = [{"v": 2, "key": {"_id": 1}, "name": "_id_"}]
        self.find_error: Optional[Exception] = None
        self.create_index_calls = 0

    def _unique_fields(self) -> List[str]:
        return [
            next(iter(idx["key"])) for idx in self.indexes if idx.get("unique") and idx["key"]
        ]

    async def insert_one(self, doc: Dict[str, Any]):
        self.database.materialize(self.name)
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        for field_name in self._unique_fields():
            if any(d.get(field_name) == doc.get(field_name) for d in self.docs):
                message = (
                    f"E11000 duplicate key error collection: {self.database.name}.{self.name} "
                    f"index: {field_name} dup key: {{ {field_name}: \"{doc.get(field_name)}\" }}"
                )
                raise DuplicateKeyError(
                    message, code=11000, details={"errmsg": message, "code": 11000}
                )
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"], acknowledged=True)

    async def find_one(self, query: Dict[str, Any]):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query: Optional[Dict[str, Any]] = None) -> FakeCursor:
        query = query or {}
        return FakeCursor([d for d in self.docs if _matches(d, query)], error=self.find_error)

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                for key, amount in update.get("$inc", {}).items():
                    doc[key] = doc.get(key, 0) + amount
                return SimpleNamespace(matched_count=1, modified_count=1, acknowledged=True)
        return SimpleNamespace(matched_count=0, modified_count=0, acknowledged=True)

    def list_indexes(self) -> FakeCursor:
        return FakeCursor(self.indexes)

    async def create_index(self, keys, name=None, **options):
        self.database.materialize(self.name)
        self.create_index_calls += 1
        key = {k: v for k, v in keys}
        name = name or "_".join(f"{k}_{v}" for k, v in keys)
        self.indexes.append({"v": 2, "key": key, "name": name, **options})
        return name


class FakeDatabase:
    """Subset of AsyncIOMotorDatabase used by the bootstrap and repositories."""

    def __init__(self, name: str, client: "FakeMotorClient"):
        self.name = name
        self.client = client
        self.collections: Dict[str, FakeCollection] = {}
        self.existing: set = set()
        self.create_collection_calls = 0
        # collection name -> number of listIndexes polls that still report a build
        self.pending_builds: Dict[str, int] = {}
        self.list_indexes_polls = 0

    def materialize(self, name: str) -> None:
        self.existing.add(name)
        self.client.existing_databases.add(self.name)

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name, self)
        return self.collections[name]

    async def list_collection_names(self) -> List[str]:
        return sorted(self.existing)

    async def create_collection(self, name: str):
        if name in self.existing:
            raise CollectionInvalid(f"collection {name} already exists")
        self.create_collection_calls += 1
        self.materialize(name)
        return self[name]

    async def command(self, command: Dict[str, Any]):
        collection_name = command["listIndexes"]
        self.list_indexes_polls += 1
        if collection_name not in self.existing:
            raise OperationFailure(f"ns does not exist: {self.name}.{collection_name}", code=26)

        batch = [dict(idx) for idx in self[collection_name].indexes]
        remaining = self.pending_builds.get(collection_name, 0)
        if remaining:
            self.pending_builds[collection_name] = remaining - 1
            batch.append({"spec": {"name": "building_idx"}, "buildUUID": "uuid"})
        return {"cursor": {"firstBatch": batch, "id": 0}, "ok": 1}


class FakeMotorClient:
    """Subset of AsyncIOMotorClient used by ConnectionManager."""

    def __init__(self, *args, **kwargs):
        self.init_kwargs = kwargs
        self.admin = MagicMock()
        self.admin.command = AsyncMock(return_value={"ok": 1})
        self.databases: Dict[str, FakeDatabase] = {}
        self.existing_databases: set = {"admin", "local"}
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name, self)
        return self.databases[name]

    async def list_database_names(self) -> List[str]:
        return sorted(self.existing_databases)

    def close(self) -> None:
        self.closed = True


# ============================================================================
# CONNECTION FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_metrics():
    """Give every test an empty metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


@pytest.fixture
def fake_client() -> FakeMotorClient:
    """Create an in-memory Motor client."""
    return FakeMotorClient()


@pytest.fixture
def patched_motor(fake_client: FakeMotorClient):
    """Patch AsyncIOMotorClient where ConnectionManager uses it."""
    with patch(
        "gallery_db.core.connection.AsyncIOMotorClient", return_value=fake_client
    ) as mock_client_class:
        yield mock_client_class


@pytest.fixture
def gallery_config() -> GalleryConfig:
    """Provide a bootstrap-enabled configuration."""
    return GalleryConfig(host="localhost", port=27017, db_name="test_gallery", bootstrap=True)


@pytest.fixture
async def connected_manager(
    patched_motor, gallery_config: GalleryConfig
) -> AsyncGenerator[ConnectionManager, None]:
    """Create a connected ConnectionManager backed by the fake client."""
    manager = ConnectionManager(gallery_config)
    await manager.connect()
    yield manager
    if manager.is_connected:
        await manager.disconnect()


@pytest.fixture
async def gallery_db(patched_motor, gallery_config: GalleryConfig) -> AsyncGenerator[GalleryDB, None]:
    """Create a connected GalleryDB backed by the fake client."""
    db = GalleryDB(gallery_config)
    await db.connect()
    yield db
    if db.connection.is_connected:
        await db.disconnect()


@pytest.fixture
def fake_db(fake_client: FakeMotorClient, gallery_config: GalleryConfig) -> FakeDatabase:
    """The fake database the connected fixtures use."""
    return fake_client[gallery_config.db_name]


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a standalone, unauthenticated MongoDB container for integration tests.

    Session-scoped: the container starts once and is reused.
    """
    try:
        from testcontainers.core.container import DockerContainer
        from testcontainers.core.waiting_utils import wait_for_logs
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    container = DockerContainer("mongo:7.0").with_exposed_ports(27017)
    try:
        container.start()
        wait_for_logs(container, "Waiting for connections", timeout=60)
    except Exception as e:  # noqa: BLE001 - Docker missing or unreachable
        pytest.skip(f"MongoDB container unavailable: {e}")

    yield container
    container.stop()


@pytest.fixture
async def real_gallery_db(mongodb_container) -> AsyncGenerator[GalleryDB, None]:
    """
    Create a bootstrapped GalleryDB connected to the container.

    Uses a unique database per test and drops it afterwards.
    """
    import os

    port = int(mongodb_container.get_exposed_port(27017))
    host = mongodb_container.get_container_host_ip()
    db_name = f"gallery_test_{os.getpid()}_{ObjectId()}"

    db = GalleryDB(GalleryConfig(host=host, port=port, db_name=db_name, bootstrap=True))
    await db.connect()
    client = db.connection.client

    yield db

    await client.drop_database(db_name)
    if db.connection.is_connected:
        await db.disconnect()
