"""
JSON File Store

One file per key under a data directory: `<prefix><key>.json`.

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a reader never sees a half-written document.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from budget_tracker.services.storage.interface import (
    CorruptValueError,
    KeyValueStoreInterface,
    StorageError,
)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """Local-disk implementation of the key-value store."""
    
    SUFFIX = ".json"
    
    def __init__(self, data_dir: Path, key_prefix: str = "budget_"):
        self._dir = Path(data_dir)
        self._prefix = key_prefix
    
    def _path(self, key: str) -> Path:
        return self._dir / f"{self._prefix}{key}{self.SUFFIX}"
    
    async def get(self, key: str) -> Optional[Any]:
        target = self._path(key)
        if not target.exists():
            return None
        try:
            with target.open('r', encoding='utf-8') as handle:
                return json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptValueError(key, str(e))
        except OSError as e:
            raise StorageError(f"Failed to read '{key}': {e}")
    
    async def set(self, key: str, value: Any) -> bool:
        target = self._path(key)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize '{key}': {e}")
        
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._dir, prefix=f".{target.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as handle:
                    handle.write(payload)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write '{key}': {e}")
        return True
    
    async def delete(self, key: str) -> bool:
        target = self._path(key)
        try:
            target.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete '{key}': {e}")
    
    async def keys(self) -> list[str]:
        if not self._dir.exists():
            return []
        pattern = f"{self._prefix}*{self.SUFFIX}"
        return sorted(
            path.name[len(self._prefix):-len(self.SUFFIX)]
            for path in self._dir.glob(pattern)
        )
