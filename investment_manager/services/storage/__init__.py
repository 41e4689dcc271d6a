"""
Storage Services Package

Provides the key-value storage interface and its backends.
Local JSON files are the default; Google Sheets and in-memory
storage are swappable alternatives.
"""

from investment_manager.services.storage.interface import (
    BackendUnavailableError,
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
)
from investment_manager.services.storage.json_file import JsonFileKeyValueStorage
from investment_manager.services.storage.memory import InMemoryKeyValueStorage
from investment_manager.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
)

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "BackendUnavailableError",
    "NotFoundError",
    "StorageError",
    # Backends
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
]
