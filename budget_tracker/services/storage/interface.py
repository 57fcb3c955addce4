"""
Abstract Key-Value Store Interface

The ledger persists four independent JSON documents by string key.
This interface keeps the ledger decoupled from where they live:
1. JSON files on local disk (default)
2. In-memory storage for testing
3. A Google Sheets worksheet

There is no transaction across keys. A crash between two writes can
leave documents inconsistent with each other.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for JSON document storage.
    
    Values are anything json.dumps accepts, except NaN and infinities.
    Keys are logical names; implementations apply their own prefix.
    """
    
    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Retrieve the document stored under a key.
        
        Args:
            key: Logical key (e.g. 'transactions')
            
        Returns:
            The decoded JSON value, or None if the key is absent
            
        Raises:
            CorruptValueError: If the stored blob is not valid JSON
            StorageError: If the backend cannot be read
        """
        pass
    
    @abstractmethod
    async def set(self, key: str, value: Any) -> bool:
        """
        Store a document under a key, replacing any previous value.
        
        Args:
            key: Logical key
            value: JSON-serializable value
            
        Returns:
            True if stored successfully
            
        Raises:
            StorageError: If the write fails
        """
        pass
    
    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a key.
        
        Returns:
            True if the key existed
        """
        pass
    
    @abstractmethod
    async def keys(self) -> list[str]:
        """List logical keys currently stored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptValueError(StorageError):
    """Stored blob could not be decoded as JSON."""
    
    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Stored value for '{key}' is not valid JSON: {reason}")


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
