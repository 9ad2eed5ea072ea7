"""
Ledger Error Taxonomy

Three terminal, local error kinds. None of them is ever retried by the
core: they describe a problem with the caller's input or with the id
the caller referenced.

Storage collaborators have their own ``StorageError`` family (see
``finledger.services.storage.interface``) which the core propagates
unchanged.
"""

from typing import Optional

from finledger.models.common import ValidationIssue


class LedgerError(Exception):
    """Base exception for all ledger rule violations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """
    Malformed, missing or contradictory input.

    Carries every issue found, not only the first one, so the caller
    can fix the whole form in one round trip.
    """

    def __init__(
        self,
        issues: list[ValidationIssue],
        message: Optional[str] = None,
    ):
        self.issues = list(issues)
        super().__init__(message or self._summarize(self.issues))

    @staticmethod
    def _summarize(issues: list[ValidationIssue]) -> str:
        if not issues:
            return "Invalid input"
        return "; ".join(issue.message for issue in issues)

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        """Shortcut for a one-issue error."""
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])


class StateError(ValidationError):
    """An invalid lifecycle transition value (e.g. an unknown loan status)."""
    pass


class NotFoundError(LedgerError):
    """The id is unknown within the caller's account."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")
