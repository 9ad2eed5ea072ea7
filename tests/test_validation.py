"""Tests for the two-stage validation pipeline."""

import pytest
from datetime import date
from decimal import Decimal

from finledger.config import LedgerSettings
from finledger.errors import StateError, ValidationError
from finledger.models import ExpenseCategory, Loan, LoanDirection, LoanStatus
from finledger.validation import (
    EntryValidator,
    LoanValidator,
    parse_enum,
    parse_loan_status,
    parse_optional_date,
)


def _fields(error: ValidationError) -> set[str]:
    return {issue.field for issue in error.issues}


class TestEntryValidator:
    """Tests for expense and income validation."""

    def test_valid_expense(self):
        expense = EntryValidator().validate_expense(
            {"name": "Lunch", "category": "Food", "amount": "250", "date": "2024-06-15"}
        )
        assert expense.amount == 25000

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError) as exc:
            EntryValidator().validate_expense({"name": "Lunch", "amount": "0", "date": "2024-06-15"})
        assert "amount" in _fields(exc.value)

    def test_negative_income_rejected(self):
        with pytest.raises(ValidationError):
            EntryValidator().validate_income({"source": "Job", "amount": "-5", "date": "2024-06-15"})

    def test_collects_every_schema_issue(self):
        """A bad form reports all of its problems at once."""
        with pytest.raises(ValidationError) as exc:
            EntryValidator().validate_expense(
                {"name": "   ", "category": "Snacks", "amount": "abc", "date": "2024-13-01"}
            )
        assert _fields(exc.value) == {"name", "category", "amount", "date"}

    def test_missing_fields_are_reported_as_missing(self):
        with pytest.raises(ValidationError) as exc:
            EntryValidator().validate_income({})
        issue_types = {issue.field: issue.issue_type for issue in exc.value.issues}
        assert issue_types["source"] == "missing"
        assert issue_types["amount"] == "missing"

    def test_amount_above_ceiling_rejected(self):
        validator = EntryValidator(LedgerSettings(max_amount=Decimal("1000")))
        with pytest.raises(ValidationError) as exc:
            validator.validate_expense({"name": "TV", "amount": "1000.01", "date": "2024-06-15"})
        assert "exceeds" in exc.value.message

    def test_amount_beyond_decimal_precision_rejected(self):
        with pytest.raises(ValidationError) as exc:
            EntryValidator().validate_expense({"name": "TV", "amount": "1e29", "date": "2024-06-15"})
        assert _fields(exc.value) == {"amount"}

    def test_non_dict_payload_rejected(self):
        with pytest.raises(ValidationError):
            EntryValidator().validate_expense(["Lunch", 250])


class TestLoanValidator:
    """Tests for loan validation, including the direction rules."""

    def test_valid_lending(self, lending_payload):
        request = LoanValidator().validate(lending_payload)
        assert request.direction == LoanDirection.LENDING

    def test_valid_borrowing_without_category(self, borrowing_payload):
        del borrowing_payload["category"]
        request = LoanValidator().validate(borrowing_payload)
        assert request.borrowing_category is None

    def test_due_before_start_rejected(self, lending_payload):
        lending_payload["dueDate"] = "2023-12-31"
        with pytest.raises(ValidationError) as exc:
            LoanValidator().validate(lending_payload)
        assert "dueDate" in _fields(exc.value)

    def test_lending_requires_address_and_phone(self, lending_payload):
        del lending_payload["address"]
        del lending_payload["phoneNumber"]
        with pytest.raises(ValidationError) as exc:
            LoanValidator().validate(lending_payload)
        assert {"address", "phone"} <= _fields(exc.value)

    def test_borrowing_does_not_require_address(self, borrowing_payload):
        LoanValidator().validate(borrowing_payload)

    def test_counterparty_name_required_for_borrowing(self, borrowing_payload):
        borrowing_payload["lenderName"] = "  "
        with pytest.raises(ValidationError) as exc:
            LoanValidator().validate(borrowing_payload)
        assert "lenderName" in _fields(exc.value)

    def test_negative_rate_rejected(self, lending_payload):
        lending_payload["interestRate"] = "-1"
        with pytest.raises(ValidationError) as exc:
            LoanValidator().validate(lending_payload)
        assert "interestRate" in _fields(exc.value)

    def test_rate_above_ceiling_rejected(self, borrowing_payload):
        borrowing_payload["interestRate"] = "1e30"
        with pytest.raises(ValidationError) as exc:
            LoanValidator().validate(borrowing_payload)
        assert _fields(exc.value) == {"interestRate"}
        assert "exceeds the maximum" in exc.value.message

    def test_rate_ceiling_is_configurable(self, borrowing_payload):
        borrowing_payload["interestRate"] = "150"
        LoanValidator(LedgerSettings(max_interest_rate=Decimal("200"))).validate(borrowing_payload)

    def test_uncomputable_total_payable_rejected(self, borrowing_payload):
        borrowing_payload["interestRate"] = "1e70"
        validator = LoanValidator(LedgerSettings(max_interest_rate=Decimal("1e80")))
        with pytest.raises(ValidationError) as exc:
            validator.validate(borrowing_payload)
        assert _fields(exc.value) == {"interestRate"}

    def test_zero_amount_rejected(self, lending_payload):
        lending_payload["amount"] = "0"
        with pytest.raises(ValidationError):
            LoanValidator().validate(lending_payload)

    def test_unknown_direction_rejected(self, lending_payload):
        lending_payload["type"] = "gifting"
        with pytest.raises(ValidationError):
            LoanValidator().validate(lending_payload)

    def test_unknown_borrowing_category_rejected(self, borrowing_payload):
        borrowing_payload["category"] = "Loan Shark"
        with pytest.raises(ValidationError):
            LoanValidator().validate(borrowing_payload)

    def test_semantic_issues_collected_together(self, lending_payload):
        lending_payload["dueDate"] = "2023-12-31"
        lending_payload["interestRate"] = "-2"
        del lending_payload["address"]
        with pytest.raises(ValidationError) as exc:
            LoanValidator().validate(lending_payload)
        assert {"dueDate", "interestRate", "address"} <= _fields(exc.value)

    def test_due_date_change_checked_against_start(self):
        loan = Loan(
            account_id="user-1",
            direction=LoanDirection.BORROWING,
            counterparty_name="Bank",
            amount_minor=100,
            start_date=date(2024, 6, 1),
            due_date=date(2024, 7, 1),
        )
        validator = LoanValidator()
        assert validator.validate_due_date_change(loan, "2024-06-01") == date(2024, 6, 1)
        with pytest.raises(ValidationError):
            validator.validate_due_date_change(loan, "2024-05-31")
        with pytest.raises(ValidationError):
            validator.validate_due_date_change(loan, "not-a-date")


class TestParsers:
    """Tests for standalone value parsers."""

    def test_parse_loan_status(self):
        assert parse_loan_status("paid") == LoanStatus.PAID
        assert parse_loan_status(" Pending ") == LoanStatus.PENDING

    @pytest.mark.parametrize("bad", ["overdue", "settled", "", None])
    def test_parse_loan_status_rejects_unknown(self, bad):
        with pytest.raises(StateError):
            parse_loan_status(bad)

    def test_state_error_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_loan_status("overdue")

    def test_parse_enum(self):
        assert parse_enum(ExpenseCategory, "category", "Food") == ExpenseCategory.FOOD
        assert parse_enum(ExpenseCategory, "category", None) is None
        with pytest.raises(ValidationError):
            parse_enum(ExpenseCategory, "category", "food")

    def test_parse_optional_date(self):
        assert parse_optional_date("dateFrom", None) is None
        with pytest.raises(ValidationError):
            parse_optional_date("dateFrom", "2024-02-30")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
