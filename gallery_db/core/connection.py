"""
Connection management for GALLERY_DB.

ConnectionManager owns the single client shared by every repository call and
guards it with an explicit state machine:

    DISCONNECTED --connect()--> CONNECTING --success--> CONNECTED
         ^                          |                       |
         +-------- failure ---------+                       |
         +---------------------- disconnect() --------------+

There is no implicit reconnect. Repositories ask for the database handle
through ``database`` and fail with NotConnectedError outside CONNECTED.
"""

import logging
import time
from enum import Enum

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ..config import GalleryConfig
from ..constants import APP_NAME
from ..exceptions import NotConnectedError, StoreConnectionError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation
from .bootstrap import BootstrapReport, SchemaBootstrapper

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle states of the shared connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionManager:
    """
    Manages the MongoDB connection lifecycle and the optional schema bootstrap.

    Example:
        manager = ConnectionManager(GalleryConfig(bootstrap=True))
        db = await manager.connect()
        ...
        await manager.disconnect()
    """

    def __init__(self, config: GalleryConfig | None = None, **overrides) -> None:
        """
        Initialize the connection manager.

        Args:
            config: Configuration (defaults to GalleryConfig() from the environment)
            **overrides: GalleryConfig keyword arguments, used when config is None

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.config = config or GalleryConfig(**overrides)
        self.config.validate()

        self._state = ConnectionState.DISCONNECTED
        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def _connection_error(self, message: str, error: BaseException) -> StoreConnectionError:
        return StoreConnectionError(
            message,
            host=self.config.host,
            port=self.config.port,
            db_name=self.config.db_name,
            context={"error_type": type(error).__name__},
        )

    async def connect(self) -> AsyncIOMotorDatabase:
        """
        Open the connection and, when configured, bootstrap the schema.

        Returns:
            The database handle

        Raises:
            StoreConnectionError: If not DISCONNECTED, or if connecting or
                bootstrapping fails (the manager is DISCONNECTED again, also
                when the call is cancelled)
        """
        if self._state is not ConnectionState.DISCONNECTED:
            raise StoreConnectionError(
                f"connect() requires state {ConnectionState.DISCONNECTED.value}, "
                f"current state is {self._state.value}",
                host=self.config.host,
                port=self.config.port,
                db_name=self.config.db_name,
            )

        start_time = time.time()
        self._state = ConnectionState.CONNECTING
        contextual_logger.info(
            "Connecting to MongoDB",
            extra={
                "host": self.config.host,
                "port": self.config.port,
                "db_name": self.config.db_name,
                "bootstrap": self.config.bootstrap,
            },
        )

        try:
            self._client = AsyncIOMotorClient(
                host=self.config.host,
                port=self.config.port,
                serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
                appname=APP_NAME,
            )
            await self._client.admin.command("ping")
            self._db = self._client[self.config.db_name]

            if self.config.bootstrap:
                await self.ensure_schema()
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.connect", duration_ms, success=False)
            contextual_logger.error(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            self._reset()
            raise self._connection_error(f"Failed to connect to MongoDB: {e}", e) from e
        except BaseException:
            # Cancellation (e.g. asyncio.wait_for timing out) propagates unchanged
            record_operation(
                "connection.connect", (time.time() - start_time) * 1000, success=False
            )
            contextual_logger.warning("MongoDB connection attempt cancelled")
            self._reset()
            raise

        self._state = ConnectionState.CONNECTED
        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.connect", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection established",
            extra={"db_name": self.config.db_name, "duration_ms": round(duration_ms, 2)},
        )
        return self._db

    async def ensure_schema(self) -> BootstrapReport:
        """
        Create missing collections and indexes.

        Runs as part of connect() when bootstrap is enabled and can be called
        on its own once connected.

        Raises:
            NotConnectedError: If there is no open client
            pymongo.errors.PyMongoError: On driver failure
        """
        if self._state is ConnectionState.DISCONNECTED or self._client is None:
            raise NotConnectedError(state=self._state.value)
        return await SchemaBootstrapper(self._client, self.config.db_name).ensure()

    async def disconnect(self) -> None:
        """
        Close the connection.

        Raises:
            NotConnectedError: If not CONNECTED
            StoreConnectionError: If the driver fails while closing
        """
        if self._state is not ConnectionState.CONNECTED:
            raise NotConnectedError(state=self._state.value)

        start_time = time.time()
        client = self._client
        self._reset()
        try:
            client.close()
        except (PyMongoError, RuntimeError) as e:
            record_operation("connection.disconnect", 0.0, success=False)
            logger.warning(f"Error closing MongoDB client: {e}")
            raise self._connection_error(f"Failed to close MongoDB connection: {e}", e) from e

        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.disconnect", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection closed", extra={"duration_ms": round(duration_ms, 2)}
        )

    def _reset(self) -> None:
        if self._client is not None and self._state is ConnectionState.CONNECTING:
            try:
                self._client.close()
            except (PyMongoError, RuntimeError) as e:
                logger.debug(f"Ignoring error while closing failed client: {e}")
        self._state = ConnectionState.DISCONNECTED
        self._client = None
        self._db = None

    async def ping(self) -> bool:
        """Return True if connected and the server answers a ping."""
        if not self.is_connected:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @property
    def client(self) -> AsyncIOMotorClient:
        """
        The MongoDB client.

        Raises:
            NotConnectedError: If not CONNECTED
        """
        if not self.is_connected:
            raise NotConnectedError(state=self._state.value)
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        The database handle every repository operation runs against.

        Raises:
            NotConnectedError: If not CONNECTED
        """
        if not self.is_connected:
            raise NotConnectedError(state=self._state.value)
        return self._db
