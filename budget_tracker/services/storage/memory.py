"""
In-Memory Store

Keeps serialized JSON strings rather than live objects, so callers never
share mutable state with the store and a test can plant a corrupt blob
with put_raw().
"""

import json
from typing import Any, Optional

from budget_tracker.services.storage.interface import (
    CorruptValueError,
    KeyValueStoreInterface,
    StorageError,
)


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Process-local store. State is lost when the process exits."""
    
    def __init__(self, key_prefix: str = "budget_"):
        self._prefix = key_prefix
        self._data: dict[str, str] = {}
    
    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"
    
    def put_raw(self, key: str, blob: str) -> None:
        """Store a blob exactly as given, bypassing serialization."""
        self._data[self._full_key(key)] = blob
    
    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(self._full_key(key))
    
    async def get(self, key: str) -> Optional[Any]:
        blob = self._data.get(self._full_key(key))
        if blob is None:
            return None
        try:
            return json.loads(blob)
        except json.JSONDecodeError as e:
            raise CorruptValueError(key, str(e))
    
    async def set(self, key: str, value: Any) -> bool:
        try:
            self._data[self._full_key(key)] = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize '{key}': {e}")
        return True
    
    async def delete(self, key: str) -> bool:
        return self._data.pop(self._full_key(key), None) is not None
    
    async def keys(self) -> list[str]:
        return [
            full_key[len(self._prefix):]
            for full_key in self._data
            if full_key.startswith(self._prefix)
        ]
