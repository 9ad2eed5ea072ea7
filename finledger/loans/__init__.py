"""Loan engine."""

from finledger.loans.engine import LoanEngine, is_due_soon, is_overdue

__all__ = ["LoanEngine", "is_due_soon", "is_overdue"]
