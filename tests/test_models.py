"""
Tests for finledger models

Test strategy:
1. Unit tests for individual components (models, validators, engines)
2. Integration tests through the LedgerService boundary
3. No real file system outside tmp_path, no network
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from finledger.models import (
    ApiResponse,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BorrowingCategory,
    EffectiveStatus,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseEntry,
    IncomeCategory,
    IncomeCreate,
    Loan,
    LoanCreate,
    LoanDirection,
    LoanStatus,
    Notification,
    NotificationKind,
    effective_status,
    total_payable_minor,
)


class TestLedgerModels:
    """Tests for expense and income payloads and entries."""

    def test_expense_create_parses_amount_to_minor_units(self):
        expense = ExpenseCreate(name="Lunch", category="Food", amount="250.00", date="2024-06-15")
        assert expense.amount == 25000
        assert expense.date == date(2024, 6, 15)
        assert expense.category == ExpenseCategory.FOOD

    def test_expense_category_defaults_to_other(self):
        expense = ExpenseCreate(name="Misc", amount="10", date="2024-06-15")
        assert expense.category == ExpenseCategory.OTHER

    def test_income_category_defaults_to_salary(self):
        income = IncomeCreate(source="Employer", amount="30000", date="2024-06-01")
        assert income.category == IncomeCategory.SALARY

    def test_request_strips_whitespace(self):
        expense = ExpenseCreate(name="  Lunch  ", amount="1", date="2024-06-15")
        assert expense.name == "Lunch"

    def test_request_rejects_unknown_category(self):
        with pytest.raises(PydanticValidationError):
            ExpenseCreate(name="Lunch", category="Snacks", amount="1", date="2024-06-15")

    def test_request_rejects_impossible_date(self):
        with pytest.raises(PydanticValidationError):
            IncomeCreate(source="Employer", amount="1", date="2024-02-30")

    def test_entry_public_dict(self):
        entry = ExpenseEntry(
            account_id="user-1",
            name="Lunch",
            category=ExpenseCategory.FOOD,
            amount_minor=25000,
            entry_date=date(2024, 6, 15),
        )
        data = entry.to_public_dict()
        assert data["amount"] == Decimal("250.00")
        assert data["date"] == "2024-06-15"
        assert data["category"] == "Food"
        assert "account_id" not in data

    def test_entry_is_immutable(self):
        entry = ExpenseEntry(
            account_id="user-1",
            name="Lunch",
            category=ExpenseCategory.FOOD,
            amount_minor=25000,
            entry_date=date(2024, 6, 15),
        )
        with pytest.raises(PydanticValidationError):
            entry.amount_minor = 1


class TestLoanModels:
    """Tests for loan payloads, derived figures and status."""

    def test_loan_create_accepts_client_aliases(self):
        request = LoanCreate.model_validate({
            "type": "lending",
            "borrowerName": "Ravi",
            "address": "Somewhere",
            "phoneNumber": "123",
            "amount": "100",
            "interest": "1",
            "startDate": "2024-01-01",
            "dueDate": "2024-02-01",
        })
        assert request.direction == LoanDirection.LENDING
        assert request.counterparty_name == "Ravi"
        assert request.counterparty_phone == "123"
        assert request.interest_rate == Decimal("1")
        assert request.amount == 10000

    def test_loan_create_accepts_snake_case(self):
        request = LoanCreate(
            direction="borrowing",
            counterparty_name="Bank",
            amount="100",
            start_date="2024-01-01",
            due_date="2024-02-01",
            borrowing_category="Third Party",
        )
        assert request.borrowing_category == BorrowingCategory.THIRD_PARTY
        assert request.interest_rate is None

    def test_total_payable_formula(self):
        # 10000.00 at 2%/month for 60 days (2 months)
        total = total_payable_minor(1000000, Decimal("2"), date(2024, 1, 1), date(2024, 3, 1))
        assert total == 1040000

    def test_total_payable_same_day_accrues_one_month(self):
        d = date(2024, 6, 15)
        assert total_payable_minor(100000, Decimal("5"), d, d) == 105000

    def test_total_payable_zero_rate_is_principal(self):
        assert total_payable_minor(12345, Decimal("0"), date(2024, 1, 1), date(2025, 1, 1)) == 12345

    def test_effective_status_is_pure(self):
        due = date(2024, 6, 14)
        assert effective_status(LoanStatus.PENDING, due, date(2024, 6, 15)) == EffectiveStatus.OVERDUE
        assert effective_status(LoanStatus.PENDING, due, date(2024, 6, 14)) == EffectiveStatus.PENDING
        assert effective_status(LoanStatus.PAID, due, date(2024, 6, 15)) == EffectiveStatus.PAID

    def test_loan_public_dict(self):
        loan = Loan(
            account_id="user-1",
            direction=LoanDirection.BORROWING,
            counterparty_name="State Bank",
            amount_minor=5000000,
            interest_rate=Decimal("1.5"),
            start_date=date(2024, 6, 1),
            due_date=date(2024, 12, 1),
            borrowing_category=BorrowingCategory.BANK,
        )
        data = loan.to_public_dict(date(2024, 6, 15))
        # 183 days -> 7 months; 50000 * 1.5% * 7 = 5250
        assert data["months"] == 7
        assert data["totalPayable"] == Decimal("55250.00")
        assert data["interest"] == Decimal("5250.00")
        assert data["status"] == "pending"
        assert data["borrowingCategory"] == "Bank"
        assert "counterpartyAddress" not in data


class TestEnvelope:
    """Tests for the ApiResponse envelope."""

    def test_ok_envelope(self):
        response = ApiResponse.ok({"a": 1}, "Done")
        assert response.to_dict() == {"success": True, "data": {"a": 1}, "message": "Done"}

    def test_fail_envelope_has_no_data(self):
        response = ApiResponse.fail("Nope")
        assert response.to_dict() == {"success": False, "message": "Nope"}


class TestNotificationModel:
    """Tests for notification rendering."""

    def test_loan_backreference_rendered_with_existence_flag(self):
        notification = Notification(
            account_id="user-1",
            kind=NotificationKind.LOAN_DUE,
            title="Loan overdue",
            message="Ravi owes you 100.00",
            loan_id="loan-1",
        )
        data = notification.to_public_dict(loan_exists=False)
        assert data["loanId"] == "loan-1"
        assert data["loanExists"] is False
        assert data["isRead"] is False

    def test_plain_notification_has_no_loan_fields(self):
        notification = Notification(
            account_id="user-1",
            kind=NotificationKind.SUGGESTION,
            title="Tip",
            message="Track your income",
        )
        assert "loanId" not in notification.to_public_dict()


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.entry_added("expense", "user-1", "e-1", "250.00", "Food")
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["details"]["category"] == "Food"

    def test_income_event_type(self):
        event = AuditEventBuilder.entry_deleted("income", "user-1", "i-1")
        assert event.event_type == AuditEventType.INCOME_DELETED
        assert event.entity_id == "i-1"

    def test_validation_failure_is_warning(self):
        event = AuditEventBuilder.validation_failed("user-1", "add_loan", [{"field": "amount"}])
        assert event.severity == AuditSeverity.WARNING
        assert event.details["issues"] == [{"field": "amount"}]

    def test_to_record_serializes_details(self):
        event = AuditEventBuilder.loan_status_updated("user-1", "l-1", "pending", "paid")
        record = event.to_record()
        assert isinstance(record["details"], str)
        assert "paid" in record["details"]


class TestCategories:
    """Tests for the fixed category enums."""

    def test_expense_categories(self):
        expected = [
            "Food", "Travel", "Shopping", "Entertainment",
            "Bills", "Health", "Education", "Other",
        ]
        assert [c.value for c in ExpenseCategory] == expected

    def test_income_categories(self):
        expected = ["Salary", "Freelance", "Investment", "Business", "Gift", "HomeMaker", "Other"]
        assert [c.value for c in IncomeCategory] == expected

    def test_borrowing_categories(self):
        assert [c.value for c in BorrowingCategory] == ["Bank", "Friends", "Third Party"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
