"""
JSON File Storage Implementation

One JSON document per account under ``data_dir``:

    {
        "expenses": [...],
        "incomes": [...],
        "loans": [...],
        "notifications": [...],
        "audit": [...]
    }

Audit events with no account go to ``_system.json``.

TRADEOFFS:
- Not suitable for high-volume data (fine for one person's ledger)
- Every operation reads the whole document; writes replace it
  atomically via a temp file and ``os.replace``
- File I/O is retried with tenacity; the ledger core itself never retries
"""

import json
import os
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

from pydantic import BaseModel
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from finledger.config import StorageSettings
from finledger.models.audit import AuditEvent
from finledger.models.ledger import ExpenseCategory, ExpenseEntry, IncomeCategory, IncomeEntry
from finledger.models.loan import Loan, LoanDirection
from finledger.models.notification import Notification
from finledger.services.storage.interface import (
    DuplicateError,
    StorageBackend,
    StorageError,
    StorageUnavailableError,
    in_range,
)

SYSTEM_DOCUMENT = "_system"

# Sections of an account document
COLLECTIONS = ("expenses", "incomes", "loans", "notifications", "audit")

ModelT = TypeVar("ModelT", bound=BaseModel)


class JsonFileStorage(StorageBackend):
    """
    JSON file implementation of every storage interface.

    Records are pydantic ``model_dump(mode="json")`` dicts, so amounts
    stay integer minor units and dates stay ISO strings on disk.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        retry_attempts: int = 3,
    ):
        self._data_dir = Path(data_dir) if data_dir else StorageSettings().data_dir
        self._lock = threading.RLock()
        self._retrying = Retrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "JsonFileStorage":
        return cls(data_dir=settings.data_dir, retry_attempts=settings.retry_attempts)

    # -------------------------------------------------------------------------
    # Document I/O
    # -------------------------------------------------------------------------

    def _path(self, account_id: Optional[str]) -> Path:
        name = quote(account_id, safe="") if account_id else SYSTEM_DOCUMENT
        if not name or name.startswith("."):
            raise StorageError(f"Invalid account id for file storage: {account_id!r}")
        return self._data_dir / f"{name}.json"

    def _read_file(self, path: Path) -> dict[str, list]:
        if not path.exists():
            return {key: [] for key in COLLECTIONS}
        with path.open("r", encoding="utf-8") as f:
            document = json.load(f)
        for key in COLLECTIONS:
            document.setdefault(key, [])
        return document

    def _write_file(self, path: Path, document: dict[str, list]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.stem, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, sort_keys=True)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _load(self, account_id: Optional[str]) -> dict[str, list]:
        path = self._path(account_id)
        try:
            return self._retrying(self._read_file, path)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read {path}: {e}")
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt ledger document {path}: {e}")

    def _store(self, account_id: Optional[str], document: dict[str, list]) -> None:
        path = self._path(account_id)
        try:
            self._retrying(self._write_file, path, document)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to write {path}: {e}")

    def _mutate(self, account_id: Optional[str], change: Callable[[dict[str, list]], Any]) -> Any:
        """Read-modify-write one document under the instance lock."""
        with self._lock:
            document = self._load(account_id)
            result = change(document)
            self._store(account_id, document)
            return result

    @staticmethod
    def _records(document: dict[str, list], collection: str, model: type[ModelT]) -> list[ModelT]:
        return [model.model_validate(raw) for raw in document[collection]]

    def _insert(self, collection: str, record: BaseModel, account_id: str, unique: bool) -> None:
        def change(document: dict[str, list]) -> None:
            rows = document[collection]
            for idx, raw in enumerate(rows):
                if raw["id"] == record.id:
                    if unique:
                        raise DuplicateError(f"{collection} record {record.id} already exists")
                    rows[idx] = record.model_dump(mode="json")
                    return
            rows.append(record.model_dump(mode="json"))

        self._mutate(account_id, change)

    def _remove(self, collection: str, account_id: str, record_id: str) -> bool:
        def change(document: dict[str, list]) -> bool:
            rows = document[collection]
            remaining = [raw for raw in rows if raw["id"] != record_id]
            document[collection] = remaining
            return len(remaining) != len(rows)

        return self._mutate(account_id, change)

    def _find(self, collection: str, model: type[ModelT], account_id: str, record_id: str) -> Optional[ModelT]:
        with self._lock:
            document = self._load(account_id)
        for raw in document[collection]:
            if raw["id"] == record_id:
                return model.model_validate(raw)
        return None

    def _all(self, collection: str, model: type[ModelT], account_id: str) -> list[ModelT]:
        with self._lock:
            document = self._load(account_id)
        return self._records(document, collection, model)

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    def save_expense(self, entry: ExpenseEntry) -> None:
        self._insert("expenses", entry, entry.account_id, unique=True)

    def get_expense(self, account_id: str, entry_id: str) -> Optional[ExpenseEntry]:
        return self._find("expenses", ExpenseEntry, account_id, entry_id)

    def list_expenses(
        self,
        account_id: str,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[ExpenseEntry]:
        return [
            entry for entry in self._all("expenses", ExpenseEntry, account_id)
            if (category is None or entry.category == category)
            and in_range(entry.entry_date, date_from, date_to)
        ]

    def delete_expense(self, account_id: str, entry_id: str) -> bool:
        return self._remove("expenses", account_id, entry_id)

    def save_income(self, entry: IncomeEntry) -> None:
        self._insert("incomes", entry, entry.account_id, unique=True)

    def get_income(self, account_id: str, entry_id: str) -> Optional[IncomeEntry]:
        return self._find("incomes", IncomeEntry, account_id, entry_id)

    def list_incomes(
        self,
        account_id: str,
        category: Optional[IncomeCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[IncomeEntry]:
        return [
            entry for entry in self._all("incomes", IncomeEntry, account_id)
            if (category is None or entry.category == category)
            and in_range(entry.entry_date, date_from, date_to)
        ]

    def delete_income(self, account_id: str, entry_id: str) -> bool:
        return self._remove("incomes", account_id, entry_id)

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def save_loan(self, loan: Loan) -> None:
        self._insert("loans", loan, loan.account_id, unique=False)

    def get_loan(self, account_id: str, loan_id: str) -> Optional[Loan]:
        return self._find("loans", Loan, account_id, loan_id)

    def list_loans(
        self,
        account_id: str,
        direction: Optional[LoanDirection] = None,
    ) -> list[Loan]:
        return [
            loan for loan in self._all("loans", Loan, account_id)
            if direction is None or loan.direction == direction
        ]

    def delete_loan(self, account_id: str, loan_id: str) -> bool:
        return self._remove("loans", account_id, loan_id)

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def save_notification(self, notification: Notification) -> None:
        self._insert("notifications", notification, notification.account_id, unique=False)

    def get_notification(self, account_id: str, notification_id: str) -> Optional[Notification]:
        return self._find("notifications", Notification, account_id, notification_id)

    def list_notifications(
        self,
        account_id: str,
        unread_only: bool = False,
    ) -> list[Notification]:
        return [
            n for n in self._all("notifications", Notification, account_id)
            if not (unread_only and n.is_read)
        ]

    def find_by_dedupe_key(self, account_id: str, dedupe_key: str) -> Optional[Notification]:
        for notification in self._all("notifications", Notification, account_id):
            if notification.dedupe_key == dedupe_key:
                return notification
        return None

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def append_event(self, event: AuditEvent) -> bool:
        def change(document: dict[str, list]) -> None:
            document["audit"].append(event.model_dump(mode="json"))

        self._mutate(event.account_id, change)
        return True

    def get_events_by_account(self, account_id: str) -> list[AuditEvent]:
        return self._all("audit", AuditEvent, account_id)

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events across every account document, newest first."""
        if limit <= 0 or not self._data_dir.exists():
            return []
        events: list[AuditEvent] = []
        with self._lock:
            for path in sorted(self._data_dir.glob("*.json")):
                try:
                    document = self._retrying(self._read_file, path)
                except OSError as e:
                    raise StorageUnavailableError(f"Failed to read {path}: {e}")
                events.extend(self._records(document, "audit", AuditEvent))
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
