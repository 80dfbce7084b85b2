"""Domain-specific exceptions for the expense ledger engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .budget import BudgetWarning


class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class InvalidDateError(ValidationError):
    """Raised when a date is malformed or does not exist on the calendar."""


class NegativeAmountError(ValidationError):
    """Raised when an expense amount is below zero."""


class OutOfRangeError(LookupError):
    """Raised when a listing position does not address a current record."""


class RecordNotFoundError(LookupError):
    """Raised when the store has no row for a given identifier."""


class BudgetExceededError(Exception):
    """Raised when an add is refused by the budget ceiling."""

    def __init__(self, warning: "BudgetWarning", message: str) -> None:
        super().__init__(message)
        self.warning = warning


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class FileAccessError(IOError):
    """Raised when a CSV file cannot be opened."""


class MalformedRowError(ValueError):
    """Raised when a CSV line cannot be parsed into an expense."""
