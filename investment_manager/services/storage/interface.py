"""
Abstract Storage Interface

DESIGN DECISION: The dashboard only needs a key-value store.
Each top-level collection is saved as one text blob under its own key.
This allows us to:
1. Keep state in local files by default
2. Use in-memory storage for testing
3. Swap in Google Sheets without touching the state store

The interface is intentionally tiny: get and set.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value persistence.

    Any backend (local files, Google Sheets, ...) must implement
    these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Fetch the value stored under a key.

        Args:
            key: Storage key, e.g. 'budget-data'

        Returns:
            The stored text, or None if nothing was saved yet

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Storage key
            value: Serialized collection snapshot

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Storage location (file, spreadsheet, worksheet) not found."""
    pass


class BackendUnavailableError(StorageError):
    """Could not connect to the storage backend."""
    pass
