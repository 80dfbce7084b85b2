"""Framework-agnostic tracker context shared by the CLI and the HTTP API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .budget import BudgetPolicy
from .csv_codec import DEFAULT_CSV_PATH, ExportReport, ImportReport, export_csv, import_csv
from .ledger import Ledger
from .models import ExpenseRecord
from .storage import DEFAULT_DB_PATH, PersistenceGateway, SQLiteGateway
from .validators import parse_amount, validate_category, validate_date

logger = logging.getLogger(__name__)


class ExpenseTracker:
    """Bundles the ledger, its budget and the store handle for one process.

    Construct it once at startup, pass it to every shell operation and close
    it (or use it as a context manager) on exit.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        budget: Optional[BudgetPolicy] = None,
        csv_path: Union[Path, str] = DEFAULT_CSV_PATH,
    ) -> None:
        self.gateway = gateway
        self.ledger = Ledger(gateway)
        self.budget = budget or BudgetPolicy()
        self.csv_path = Path(csv_path)

    @classmethod
    def open(
        cls,
        db_path: Union[Path, str] = DEFAULT_DB_PATH,
        csv_path: Union[Path, str] = DEFAULT_CSV_PATH,
        ceiling: Optional[float] = None,
    ) -> "ExpenseTracker":
        """Open the SQLite store and hydrate the ledger from it."""
        tracker = cls(SQLiteGateway(db_path), BudgetPolicy(ceiling), csv_path)
        try:
            tracker.ledger.load_from()
        except Exception:
            tracker.close()
            raise
        return tracker

    # Public API -----------------------------------------------------------
    def add_expense(self, date: object, category: object, amount: object) -> ExpenseRecord:
        """Record an expense unless the budget ceiling refuses it."""
        date = validate_date(date)
        category = validate_category(category)
        value = parse_amount(amount)
        self.budget.enforce(self.ledger.total(), value)
        return self.ledger.add(date, category, value)

    def edit_expense(self, position: int, date: object, category: object, amount: object) -> ExpenseRecord:
        return self.ledger.update(position, date, category, amount)

    def delete_expense(self, position: int) -> ExpenseRecord:
        return self.ledger.remove(position)

    def set_budget(self, value: object) -> Optional[float]:
        ceiling = self.budget.set_ceiling(value)
        if ceiling is None:
            logger.info("Budget cleared")
        else:
            logger.info("Budget set to %.2f", ceiling)
        return ceiling

    def total(self) -> float:
        return self.ledger.total()

    def remaining(self) -> Optional[float]:
        return self.budget.remaining(self.ledger.total())

    def export_csv(self, path: Union[Path, str, None] = None) -> ExportReport:
        return export_csv(self.ledger.records(), path or self.csv_path)

    def import_csv(self, path: Union[Path, str, None] = None) -> ImportReport:
        return import_csv(self.ledger, path or self.csv_path)

    def close(self) -> None:
        self.gateway.close()

    def __enter__(self) -> "ExpenseTracker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
