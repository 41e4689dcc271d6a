"""Services package."""

from investment_manager.services.storage import (
    BackendUnavailableError,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    "BackendUnavailableError",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorageInterface",
    "NotFoundError",
    "StorageError",
]
