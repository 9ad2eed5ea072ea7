"""Tests for the ledger store."""

import pytest
from datetime import date

from finledger.audit import AuditLogger
from finledger.errors import NotFoundError, ValidationError
from finledger.ledger import LedgerStore
from finledger.models import AuditEventType, EntryKind, ExpenseCategory
from finledger.primitives import from_minor

ACCOUNT = "user-1"
OTHER_ACCOUNT = "user-2"


@pytest.fixture
def ledger(storage) -> LedgerStore:
    return LedgerStore(storage, audit_logger=AuditLogger(storage))


def _expense(name="Lunch", amount="250.00", day="2024-06-15", category="Food") -> dict:
    return {"name": name, "category": category, "amount": amount, "date": day}


def _income(source="Employer", amount="5000.00", day="2024-06-01") -> dict:
    return {"source": source, "amount": amount, "date": day}


class TestBalance:
    """Balance is always recomputed from the entries."""

    def test_balance_after_income_and_expense(self, ledger):
        ledger.add_income(ACCOUNT, _income(amount="5000.00"))
        expense = ledger.add_expense(ACCOUNT, _expense(amount="1200.50"))
        assert str(from_minor(ledger.balance(ACCOUNT))) == "3799.50"

        ledger.delete_expense(ACCOUNT, expense.id)
        assert str(from_minor(ledger.balance(ACCOUNT))) == "5000.00"

    def test_balance_can_go_negative(self, ledger):
        ledger.add_expense(ACCOUNT, _expense(amount="10"))
        assert ledger.balance(ACCOUNT) == -1000

    def test_empty_account_has_zero_totals(self, ledger):
        assert ledger.balance(ACCOUNT) == 0
        assert ledger.total_income(ACCOUNT) == 0
        assert ledger.total_expenses(ACCOUNT) == 0

    def test_accounts_are_isolated(self, ledger):
        ledger.add_income(ACCOUNT, _income(amount="100"))
        ledger.add_income(OTHER_ACCOUNT, _income(amount="7"))
        assert ledger.total_income(ACCOUNT) == 10000
        assert ledger.total_income(OTHER_ACCOUNT) == 700


class TestMutations:
    """Tests for add and delete."""

    def test_invalid_expense_writes_nothing(self, ledger):
        with pytest.raises(ValidationError):
            ledger.add_expense(ACCOUNT, _expense(amount="0"))
        assert ledger.list_expenses(ACCOUNT) == []

    def test_repeat_delete_is_not_found(self, ledger):
        entry = ledger.add_income(ACCOUNT, _income())
        ledger.delete_income(ACCOUNT, entry.id)
        with pytest.raises(NotFoundError):
            ledger.delete_income(ACCOUNT, entry.id)

    def test_delete_is_scoped_to_account(self, ledger):
        entry = ledger.add_expense(ACCOUNT, _expense())
        with pytest.raises(NotFoundError):
            ledger.delete_expense(OTHER_ACCOUNT, entry.id)
        assert len(ledger.list_expenses(ACCOUNT)) == 1

    def test_blank_notes_stored_as_none(self, ledger):
        entry = ledger.add_expense(ACCOUNT, {**_expense(), "notes": "   "})
        assert entry.notes is None

    def test_mutations_are_audited(self, ledger, storage):
        entry = ledger.add_expense(ACCOUNT, _expense())
        ledger.delete_expense(ACCOUNT, entry.id)
        types = [e.event_type for e in storage.get_events_by_account(ACCOUNT)]
        assert types == [AuditEventType.EXPENSE_ADDED, AuditEventType.EXPENSE_DELETED]


class TestListings:
    """Listings are newest date first, ties newest-created first."""

    def test_order(self, ledger):
        first = ledger.add_expense(ACCOUNT, _expense(name="A", day="2024-06-10"))
        second = ledger.add_expense(ACCOUNT, _expense(name="B", day="2024-06-12"))
        third = ledger.add_expense(ACCOUNT, _expense(name="C", day="2024-06-10"))
        ids = [e.id for e in ledger.list_expenses(ACCOUNT)]
        assert ids == [second.id, third.id, first.id]

    def test_category_filter(self, ledger):
        ledger.add_expense(ACCOUNT, _expense(category="Food"))
        ledger.add_expense(ACCOUNT, _expense(category="Travel"))
        listed = ledger.list_expenses(ACCOUNT, category="Travel")
        assert [e.category for e in listed] == [ExpenseCategory.TRAVEL]

    def test_unknown_category_filter_rejected(self, ledger):
        with pytest.raises(ValidationError):
            ledger.list_expenses(ACCOUNT, category="Snacks")

    def test_date_range_is_inclusive(self, ledger):
        for day in ("2024-06-01", "2024-06-10", "2024-06-20"):
            ledger.add_income(ACCOUNT, _income(day=day))
        listed = ledger.list_incomes(ACCOUNT, date_from="2024-06-01", date_to="2024-06-10")
        assert [e.entry_date for e in listed] == [date(2024, 6, 10), date(2024, 6, 1)]


class TestAggregates:
    """Tests for category and per-day sums."""

    def test_expenses_by_category(self, ledger):
        ledger.add_expense(ACCOUNT, _expense(category="Food", amount="100"))
        ledger.add_expense(ACCOUNT, _expense(category="Food", amount="50.50"))
        ledger.add_expense(ACCOUNT, _expense(category="Bills", amount="20"))
        assert ledger.expenses_by_category(ACCOUNT) == {
            ExpenseCategory.FOOD: 15050,
            ExpenseCategory.BILLS: 2000,
        }

    def test_sum_by_day(self, ledger):
        ledger.add_expense(ACCOUNT, _expense(amount="10", day="2024-06-14"))
        ledger.add_expense(ACCOUNT, _expense(amount="5", day="2024-06-14"))
        ledger.add_expense(ACCOUNT, _expense(amount="1", day="2024-05-01"))
        totals = ledger.sum_by_day(ACCOUNT, EntryKind.EXPENSE, date(2024, 6, 1), date(2024, 6, 30))
        assert totals == {date(2024, 6, 14): 1500}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
