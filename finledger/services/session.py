"""
Session Key-Value Capability

The client layer keeps its auth token and cached user profile in a
device-local key-value store. The ledger core never touches it; this
module only defines the narrow capability the client layer is handed,
plus an in-memory implementation for tests and local runs.
"""

import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

TOKEN_KEY = "authToken"
USER_KEY = "userData"


class KeyValueStore(ABC):
    """get / set / delete / clear over string keys and values."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Thread-safe dict-backed store."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class SessionStore:
    """
    Token and user profile accessors on top of a ``KeyValueStore``.

    Only stores and retrieves values; nothing here builds or checks
    credentials.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def save_token(self, token: str) -> None:
        self._store.set(TOKEN_KEY, token)

    def get_token(self) -> Optional[str]:
        return self._store.get(TOKEN_KEY)

    def remove_token(self) -> None:
        self._store.delete(TOKEN_KEY)

    def save_user(self, user: dict[str, Any]) -> None:
        self._store.set(USER_KEY, json.dumps(user))

    def get_user(self) -> Optional[dict[str, Any]]:
        raw = self._store.get(USER_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def remove_user(self) -> None:
        self._store.delete(USER_KEY)

    def clear_all(self) -> None:
        self._store.clear()
