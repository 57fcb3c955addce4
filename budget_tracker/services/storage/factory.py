"""Build the configured key-value store."""

from typing import Optional

from budget_tracker.config import StorageSettings, get_settings
from budget_tracker.services.storage.interface import KeyValueStoreInterface
from budget_tracker.services.storage.json_file import JsonFileKeyValueStore
from budget_tracker.services.storage.memory import InMemoryKeyValueStore


def create_store(settings: Optional[StorageSettings] = None) -> KeyValueStoreInterface:
    """
    Create the store selected by StorageSettings.backend.
    
    The Google Sheets backend is imported only when selected, so gspread
    and its credentials are not touched otherwise.
    """
    settings = settings or get_settings().storage
    
    if settings.backend == "memory":
        return InMemoryKeyValueStore(key_prefix=settings.key_prefix)
    
    if settings.backend == "google_sheets":
        from budget_tracker.services.storage.google_sheets import (
            GoogleSheetsKeyValueStore,
        )
        return GoogleSheetsKeyValueStore(key_prefix=settings.key_prefix)
    
    return JsonFileKeyValueStore(
        data_dir=settings.data_dir,
        key_prefix=settings.key_prefix,
    )
