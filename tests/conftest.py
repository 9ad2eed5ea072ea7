"""
Shared fixtures.

Every test runs against a fixed "today" so that overdue and due-soon
logic, chart buckets and month boundaries are deterministic.
"""

from datetime import date

import pytest

from finledger.config import LedgerSettings
from finledger.orchestrator import LedgerService
from finledger.services.storage import InMemoryStorage

# A Saturday in a 30-day month
TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def service(storage, settings, clock) -> LedgerService:
    return LedgerService(storage=storage, settings=settings, clock=clock)


@pytest.fixture
def lending_payload() -> dict:
    """A camelCase lending request as the mobile client sends it."""
    return {
        "type": "lending",
        "borrowerName": "Ravi Kumar",
        "address": "12 MG Road, Bengaluru",
        "phoneNumber": "9876543210",
        "amount": "10000",
        "interestRate": "2",
        "startDate": "2024-01-01",
        "dueDate": "2024-03-01",
    }


@pytest.fixture
def borrowing_payload() -> dict:
    return {
        "direction": "borrowing",
        "lenderName": "State Bank",
        "category": "Bank",
        "amount": "50000.00",
        "interestRate": "1.5",
        "startDate": "2024-06-01",
        "dueDate": "2024-12-01",
    }
