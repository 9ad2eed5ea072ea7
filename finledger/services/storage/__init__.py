"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The in-memory backend is the default; the JSON file backend keeps one
document per account on disk.
"""

from typing import Optional

from finledger.config import StorageSettings
from finledger.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    LoanStorageInterface,
    NotificationStorageInterface,
    StorageBackend,
    StorageError,
    StorageUnavailableError,
)
from finledger.services.storage.json_file import JsonFileStorage
from finledger.services.storage.memory import InMemoryStorage


def create_storage(settings: Optional[StorageSettings] = None) -> StorageBackend:
    """Build the backend named by the storage settings."""
    settings = settings or StorageSettings()
    if settings.backend == "json":
        return JsonFileStorage.from_settings(settings)
    return InMemoryStorage()


__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    "LoanStorageInterface",
    "NotificationStorageInterface",
    "StorageBackend",
    # Exceptions
    "DuplicateError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
    "create_storage",
]
