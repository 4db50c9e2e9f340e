"""
Secondary index definitions and helpers.
"""

from .helpers import (
    MANAGED_INDEXES,
    IndexDefinition,
    building_index_names,
    ensure_index,
    indexes_for,
    list_index_names,
    wait_for_indexes,
)

__all__ = [
    "IndexDefinition",
    "MANAGED_INDEXES",
    "indexes_for",
    "list_index_names",
    "ensure_index",
    "building_index_names",
    "wait_for_indexes",
]
