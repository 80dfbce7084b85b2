"""Persistence gateway for the expense ledger."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Protocol, Union

from .exceptions import PersistenceError, RecordNotFoundError
from .models import ExpenseRecord

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("expensesfinal.db")

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS expenses ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "date TEXT, type TEXT, amount REAL)"
)


class PersistenceGateway(Protocol):
    """Durable store the ledger mirrors every mutation to."""

    def create(self, date: str, category: str, amount: float) -> int: ...

    def update(self, record_id: int, date: str, category: str, amount: float) -> None: ...

    def delete(self, record_id: int) -> None: ...

    def load_all(self) -> List[ExpenseRecord]: ...

    def clear_all(self) -> None: ...

    def close(self) -> None: ...


class SQLiteGateway:
    """SQLite-backed store holding a single ``expenses`` table.

    The connection is opened on construction and held until :meth:`close`.
    Pass ``":memory:"`` for a throwaway database.
    """

    def __init__(self, path: Union[Path, str] = DEFAULT_DB_PATH) -> None:
        self._path = str(path)
        try:
            # The HTTP API may serve requests from worker threads.
            self._conn = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.execute(_SCHEMA)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to open database {self._path}") from exc
        self._closed = False
        logger.debug("Opened expense store at %s", self._path)

    def create(self, date: str, category: str, amount: float) -> int:
        cursor = self._execute(
            "INSERT INTO expenses (date, type, amount) VALUES (?, ?, ?)",
            (date, category, amount),
            action="insert",
        )
        return int(cursor.lastrowid)

    def update(self, record_id: int, date: str, category: str, amount: float) -> None:
        cursor = self._execute(
            "UPDATE expenses SET date = ?, type = ?, amount = ? WHERE id = ?",
            (date, category, amount, record_id),
            action="update",
        )
        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Expense {record_id} not found in store")

    def delete(self, record_id: int) -> None:
        cursor = self._execute(
            "DELETE FROM expenses WHERE id = ?", (record_id,), action="delete"
        )
        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Expense {record_id} not found in store")

    def load_all(self) -> List[ExpenseRecord]:
        cursor = self._execute(
            "SELECT id, COALESCE(date, '') AS date, COALESCE(type, '') AS category, "
            "COALESCE(amount, 0.0) AS amount FROM expenses ORDER BY id",
            (),
            action="load",
        )
        return [ExpenseRecord.from_dict(dict(row)) for row in cursor.fetchall()]

    def clear_all(self) -> None:
        self._execute("DELETE FROM expenses", (), action="clear")

    def close(self) -> None:
        if self._closed:
            return
        self._conn.close()
        self._closed = True
        logger.debug("Closed expense store at %s", self._path)

    def __enter__(self) -> "SQLiteGateway":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def path(self) -> str:
        return self._path

    def _execute(self, sql: str, params: tuple, *, action: str) -> sqlite3.Cursor:
        if self._closed:
            raise PersistenceError(f"Cannot {action}: store {self._path} is closed")
        try:
            # Connection as context manager commits on success, rolls back on error.
            with self._conn:
                return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            logger.error("Failed to %s expense rows: %s", action, exc)
            raise PersistenceError(f"Failed to {action} expenses in {self._path}") from exc
