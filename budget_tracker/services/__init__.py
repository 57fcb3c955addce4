"""Services package."""

from budget_tracker.services.notifications import (
    CollectingNotificationHook,
    NotificationHookInterface,
)
from budget_tracker.services.storage import (
    ConnectionError,
    CorruptValueError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    StorageError,
    create_store,
)

__all__ = [
    # Notification hooks
    "CollectingNotificationHook",
    "NotificationHookInterface",
    # Storage services
    "ConnectionError",
    "CorruptValueError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStoreInterface",
    "StorageError",
    "create_store",
]
