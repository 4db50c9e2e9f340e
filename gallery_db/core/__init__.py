"""
Connection lifecycle and schema bootstrap.
"""

from .bootstrap import BootstrapReport, SchemaBootstrapper
from .connection import ConnectionManager, ConnectionState

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "SchemaBootstrapper",
    "BootstrapReport",
]
