import sqlite3

import pytest

from expense_ledger.exceptions import PersistenceError, RecordNotFoundError
from expense_ledger.models import ExpenseRecord
from expense_ledger.storage import SQLiteGateway


def test_schema_matches_expected_columns(tmp_path):
    path = tmp_path / "expenses.db"
    SQLiteGateway(path).close()
    conn = sqlite3.connect(path)
    try:
        columns = [row[1] for row in conn.execute("PRAGMA table_info(expenses)")]
    finally:
        conn.close()
    assert columns == ["id", "date", "type", "amount"]


def test_crud_cycle(gateway):
    first = gateway.create("01/01/2024", "Food", 1.5)
    second = gateway.create("02/01/2024", "Fuel", 2.0)
    assert second > first

    gateway.update(first, "03/01/2024", "Rent", 9.0)
    gateway.delete(second)
    assert gateway.load_all() == [ExpenseRecord(first, "03/01/2024", "Rent", 9.0)]

    gateway.clear_all()
    assert gateway.load_all() == []


def test_missing_identifier(gateway):
    with pytest.raises(RecordNotFoundError):
        gateway.update(123, "01/01/2024", "Food", 1.0)
    with pytest.raises(RecordNotFoundError):
        gateway.delete(123)


def test_data_survives_reopen(tmp_path):
    path = tmp_path / "expenses.db"
    with SQLiteGateway(path) as store:
        store.create("01/01/2024", "Food", 4.25)
    with SQLiteGateway(path) as store:
        assert [record.amount for record in store.load_all()] == [4.25]


def test_open_failure_raises_persistence_error(tmp_path):
    with pytest.raises(PersistenceError):
        SQLiteGateway(tmp_path / "no" / "such" / "dir.db")


def test_closed_store_refuses_operations(tmp_path):
    store = SQLiteGateway(tmp_path / "expenses.db")
    store.close()
    store.close()
    with pytest.raises(PersistenceError):
        store.load_all()


def test_quotes_in_category_are_stored_verbatim(gateway):
    record_id = gateway.create("01/01/2024", "Bob's 'cafe'", 3.0)
    assert gateway.load_all()[0] == ExpenseRecord(record_id, "01/01/2024", "Bob's 'cafe'", 3.0)
