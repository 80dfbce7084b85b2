"""Data models for the expense ledger domain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

__all__ = ["ExpenseRecord", "DATE_FORMAT", "DATE_LENGTH", "CATEGORY_MAX_LENGTH"]

DATE_FORMAT = "dd/mm/yyyy"
DATE_LENGTH = 10
CATEGORY_MAX_LENGTH = 29


@dataclass(frozen=True)
class ExpenseRecord:
    """One expense entry.

    ``id`` is ``0`` until the persistence gateway assigns a row identifier.
    """

    id: int
    date: str
    category: str
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives."""
        return {
            "id": self.id,
            "date": self.date,
            "category": self.category,
            "amount": f"{self.amount:.2f}",
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseRecord":
        """Hydrate a record from JSON-native data."""
        return cls(
            id=int(data.get("id") or 0),
            date=data["date"],
            category=data["category"],
            amount=float(data["amount"]),
        )
