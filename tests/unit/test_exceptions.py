"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

from gallery_db.exceptions import (ConfigurationError, GalleryDBError,
                                   InsertError, InvalidTokenError,
                                   NotConnectedError, NotFoundError,
                                   StoreConnectionError)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_gallery_db_error_is_runtime_error(self):
        """Test that GalleryDBError is a RuntimeError."""
        error = GalleryDBError("test error")
        assert isinstance(error, RuntimeError)

    def test_all_errors_inherit_from_base(self):
        """Test that every specific error derives from GalleryDBError."""
        errors = [
            ConfigurationError("bad config"),
            StoreConnectionError("connect failed"),
            NotConnectedError(),
            InsertError("insert failed"),
            NotFoundError("missing"),
            InvalidTokenError("bad token"),
        ]
        for error in errors:
            assert isinstance(error, GalleryDBError)
            assert isinstance(error, RuntimeError)

    def test_not_found_and_invalid_token_are_distinct(self):
        """Test that callers can tell a missing record from a bad token."""
        assert not isinstance(InvalidTokenError("x"), NotFoundError)
        assert not isinstance(NotFoundError("x"), InvalidTokenError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_base_error_message(self):
        """Test GalleryDBError message without context."""
        error = GalleryDBError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.context == {}

    def test_base_error_with_context(self):
        """Test GalleryDBError message with context."""
        error = GalleryDBError("Something went wrong", context={"collection": "images"})
        assert "context:" in str(error)
        assert "collection=images" in str(error)

    def test_not_connected_default_message(self):
        """Test NotConnectedError default message and state."""
        error = NotConnectedError(state="disconnected")
        assert error.message == "not connected"
        assert error.state == "disconnected"
        assert error.context == {"state": "disconnected"}

    def test_store_connection_error_context(self):
        """Test StoreConnectionError carries host, port and database."""
        error = StoreConnectionError(
            "Connection failed", host="localhost", port=27017, db_name="gallery"
        )
        assert error.host == "localhost"
        assert error.port == 27017
        assert error.db_name == "gallery"
        assert error.context == {"host": "localhost", "port": 27017, "db_name": "gallery"}

    def test_insert_error_first_error(self):
        """Test InsertError keeps the store's first error."""
        error = InsertError("E11000 duplicate key", collection="users", first_error="E11000")
        assert error.first_error == "E11000"
        assert error.collection == "users"
        assert str(error).startswith("E11000 duplicate key")

    def test_not_found_error_key(self):
        """Test NotFoundError records what was looked up."""
        error = NotFoundError("user ghost not found", collection="users", key="ghost")
        assert error.key == "ghost"
        assert "key=ghost" in str(error)

    def test_invalid_token_error_token(self):
        """Test InvalidTokenError records the offending token."""
        error = InvalidTokenError("invalid token length 3", token="abc")
        assert error.token == "abc"
        assert error.context == {"token": "abc"}

    def test_configuration_error_with_value(self):
        """Test ConfigurationError with key and value."""
        error = ConfigurationError("bad port", config_key="port", config_value=0)
        assert error.config_key == "port"
        assert error.config_value == 0
        assert error.context == {"config_key": "port", "config_value": 0}
