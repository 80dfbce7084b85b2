"""Shared fixtures for the expense ledger test suite."""

from typing import List

import pytest

from expense_ledger.exceptions import PersistenceError
from expense_ledger.ledger import Ledger
from expense_ledger.models import ExpenseRecord
from expense_ledger.services import ExpenseTracker
from expense_ledger.storage import SQLiteGateway


class FlakyGateway:
    """Wraps a real gateway and fails the operations named in ``failing``."""

    def __init__(self, inner: SQLiteGateway) -> None:
        self.inner = inner
        self.failing = set()

    def _check(self, action: str) -> None:
        if action in self.failing:
            raise PersistenceError(f"simulated {action} failure")

    def create(self, date: str, category: str, amount: float) -> int:
        self._check("create")
        return self.inner.create(date, category, amount)

    def update(self, record_id: int, date: str, category: str, amount: float) -> None:
        self._check("update")
        self.inner.update(record_id, date, category, amount)

    def delete(self, record_id: int) -> None:
        self._check("delete")
        self.inner.delete(record_id)

    def load_all(self) -> List[ExpenseRecord]:
        self._check("load")
        return self.inner.load_all()

    def clear_all(self) -> None:
        self._check("clear")
        self.inner.clear_all()

    def close(self) -> None:
        self.inner.close()


@pytest.fixture
def gateway():
    store = SQLiteGateway(":memory:")
    yield store
    store.close()


@pytest.fixture
def flaky_gateway(gateway):
    return FlakyGateway(gateway)


@pytest.fixture
def ledger(gateway):
    return Ledger(gateway)


@pytest.fixture
def csv_path(tmp_path):
    return tmp_path / "expensesfinal.csv"


@pytest.fixture
def tracker(gateway, csv_path):
    return ExpenseTracker(gateway, csv_path=csv_path)
