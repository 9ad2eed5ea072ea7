"""Expense and income ledger."""

from finledger.ledger.store import LedgerStore, newest_first

__all__ = ["LedgerStore", "newest_first"]
