"""
finledger - Personal Finance Ledger and Loan Engine

The rules that turn raw expense, income and loan records into
balances, interest-bearing payables, loan lifecycle state and
spending insights.

DESIGN PRINCIPLES:
1. Money is integer minor units; Decimal only at the edges
2. Fail early, fail visibly; validate before any write
3. Derived state (balance, overdue) is computed, never stored
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "finledger Team"
