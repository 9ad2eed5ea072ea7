"""Services package."""

from finledger.services.session import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SessionStore,
)
from finledger.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
    LoanStorageInterface,
    NotificationStorageInterface,
    StorageBackend,
    StorageError,
    StorageUnavailableError,
    create_storage,
)

__all__ = [
    # Session capability
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SessionStore",
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryStorage",
    "JsonFileStorage",
    "LedgerStorageInterface",
    "LoanStorageInterface",
    "NotificationStorageInterface",
    "StorageBackend",
    "StorageError",
    "StorageUnavailableError",
    "create_storage",
]
