"""
Custom exceptions for GALLERY_DB.

Every error raised by the access layer derives from GalleryDBError, which
stays a RuntimeError so callers catching RuntimeError keep working.
"""

from typing import Any, Dict, Optional


class GalleryDBError(RuntimeError):
    """
    Base exception for GALLERY_DB errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection,
                 host, token, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(GalleryDBError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class StoreConnectionError(GalleryDBError):
    """
    Raised when connecting, bootstrapping or disconnecting fails.

    Attributes:
        message: Error message
        host: Server host (if available)
        port: Server port (if available)
        db_name: Database name (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if host:
            context["host"] = host
        if port is not None:
            context["port"] = port
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.host = host
        self.port = port
        self.db_name = db_name


class NotConnectedError(GalleryDBError):
    """
    Raised when an operation needs a live connection and there is none.

    Attributes:
        state: Connection state at the time of the call
    """

    def __init__(self, message: str = "not connected", state: Optional[str] = None) -> None:
        context = {"state": state} if state else {}
        super().__init__(message, context=context)
        self.state = state


class InsertError(GalleryDBError):
    """
    Raised when the store rejects an insert.

    Attributes:
        collection: Target collection
        first_error: The store's description of the first failed write
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        first_error: Optional[str] = None,
    ) -> None:
        context: Dict[str, Any] = {}
        if collection:
            context["collection"] = collection
        super().__init__(message, context=context)
        self.collection = collection
        self.first_error = first_error


class NotFoundError(GalleryDBError):
    """
    Raised when a lookup by id, token or username yields no record.

    Attributes:
        collection: Collection that was searched
        key: The value that was looked up
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        key: Optional[Any] = None,
    ) -> None:
        context: Dict[str, Any] = {}
        if collection:
            context["collection"] = collection
        if key is not None:
            context["key"] = key
        super().__init__(message, context=context)
        self.collection = collection
        self.key = key


class InvalidTokenError(GalleryDBError):
    """
    Raised when a public image token cannot be decoded.

    Attributes:
        token: The offending token
    """

    def __init__(self, message: str, token: Optional[Any] = None) -> None:
        super().__init__(message, context={"token": token} if token is not None else None)
        self.token = token
