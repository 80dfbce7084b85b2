"""Core expense ledger engine."""

from .budget import BudgetPolicy, BudgetWarning
from .exceptions import (
    BudgetExceededError,
    FileAccessError,
    InvalidDateError,
    MalformedRowError,
    NegativeAmountError,
    OutOfRangeError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from .ledger import Ledger
from .models import ExpenseRecord
from .services import ExpenseTracker
from .storage import PersistenceGateway, SQLiteGateway
from .validators import is_valid_date

__all__ = [
    "BudgetPolicy",
    "BudgetWarning",
    "ExpenseRecord",
    "ExpenseTracker",
    "Ledger",
    "PersistenceGateway",
    "SQLiteGateway",
    "is_valid_date",
    "BudgetExceededError",
    "FileAccessError",
    "InvalidDateError",
    "MalformedRowError",
    "NegativeAmountError",
    "OutOfRangeError",
    "PersistenceError",
    "RecordNotFoundError",
    "ValidationError",
]
