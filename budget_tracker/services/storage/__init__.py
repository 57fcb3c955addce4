"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
JSON files are the default backend; Google Sheets and in-memory stores
are drop-in replacements.
"""

from budget_tracker.services.storage.interface import (
    ConnectionError,
    CorruptValueError,
    KeyValueStoreInterface,
    StorageError,
)
from budget_tracker.services.storage.factory import create_store
from budget_tracker.services.storage.json_file import JsonFileKeyValueStore
from budget_tracker.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interface
    "KeyValueStoreInterface",
    # Exceptions
    "ConnectionError",
    "CorruptValueError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "create_store",
]
