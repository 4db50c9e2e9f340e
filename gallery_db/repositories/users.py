"""
User repository.
"""

from typing import Any

from pymongo.errors import PyMongoError

from ..constants import USERS_COLLECTION
from ..core.connection import ConnectionManager
from ..exceptions import InsertError, NotFoundError
from ..indexes import wait_for_indexes
from ..observability import get_logger as get_contextual_logger
from ..observability import timed_operation
from ..utils.passwords import CredentialHasher
from .base import BaseRepository, utcnow
from .models import User

contextual_logger = get_contextual_logger(__name__)


class UserRepository(BaseRepository[User]):
    """
    CRUD and credential checks for the users collection.

    Username uniqueness comes from the unique index created at bootstrap;
    a duplicate insert surfaces as InsertError.
    """

    collection_name = USERS_COLLECTION
    entity_class = User

    def __init__(
        self,
        connection: ConnectionManager,
        hasher: CredentialHasher | None = None,
    ) -> None:
        super().__init__(connection)
        self._hasher = hasher or CredentialHasher(connection.config.password_scheme)

    @timed_operation("users.save")
    async def save_user(self, user: User | dict[str, Any]) -> User:
        """
        Store a new user, replacing the plaintext password with its digest.

        Raises:
            NotConnectedError: If not connected
            InsertError: If the store rejects the insert (e.g. duplicate username)
        """
        collection = self.collection
        user = self._coerce(user)
        plaintext = user.password
        user.password = self._hasher.hash(plaintext)
        user.created_at = utcnow()

        try:
            object_id = await self._insert(collection, user)
        except InsertError:
            # leave the caller's record retryable
            user.password = plaintext
            raise
        return await self._fetch(collection, object_id)

    @timed_operation("users.get")
    async def get_user(self, username: str) -> User:
        """
        Look up a user by username.

        Raises:
            NotConnectedError: If not connected
            NotFoundError: If no user matches or the cursor fails while advancing
        """
        collection = self.collection
        await wait_for_indexes(collection)

        cursor = collection.find({"username": username}).limit(1)
        try:
            doc = await cursor.next()
        except StopAsyncIteration:
            raise NotFoundError(
                f"user {username} not found", collection=self.collection_name, key=username
            ) from None
        except PyMongoError as e:
            contextual_logger.warning(
                "Cursor failed during user lookup",
                extra={"username": username, "error": str(e)},
            )
            raise NotFoundError(
                f"user {username} not found", collection=self.collection_name, key=username
            ) from e

        return self._to_entity(doc)

    @timed_operation("users.authenticate")
    async def authenticate(self, username: str, password: str) -> bool:
        """
        Check a username/password pair.

        An unknown user and a wrong password both return False.

        Raises:
            NotConnectedError: If not connected
        """
        try:
            user = await self.get_user(username)
        except NotFoundError:
            return False
        return self._hasher.verify(password, user.password)
