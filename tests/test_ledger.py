import pytest

from expense_ledger.exceptions import (
    InvalidDateError,
    NegativeAmountError,
    OutOfRangeError,
    PersistenceError,
    ValidationError,
)
from expense_ledger.ledger import Ledger
from expense_ledger.models import ExpenseRecord


def _seed(ledger):
    ledger.add("01/01/2024", "Food", 10)
    ledger.add("02/01/2024", "Travel", 25.5)
    ledger.add("03/01/2024", "food", 4.5)


def test_add_assigns_identifier_and_persists(ledger, gateway):
    record = ledger.add("15/03/2024", "Food", "12.75")
    assert record.id > 0
    assert record.amount == 12.75
    assert ledger.records() == [record]
    assert gateway.load_all() == [record]


def test_add_negative_amount_changes_nothing(ledger, gateway):
    _seed(ledger)
    with pytest.raises(NegativeAmountError):
        ledger.add("01/02/2024", "Food", -1)
    assert len(ledger) == 3
    assert ledger.total() == 40.0
    assert len(gateway.load_all()) == 3


def test_add_invalid_date_changes_nothing(ledger):
    with pytest.raises(InvalidDateError):
        ledger.add("31/02/2024", "Food", 5)
    assert len(ledger) == 0
    assert ledger.total() == 0.0


def test_add_requires_category(ledger):
    with pytest.raises(ValidationError):
        ledger.add("01/02/2024", "  ", 5)
    assert len(ledger) == 0


def test_identifiers_are_unique(ledger):
    _seed(ledger)
    ids = [record.id for record in ledger]
    assert len(set(ids)) == len(ids)


def test_update_replaces_fields_and_keeps_identifier(ledger, gateway):
    _seed(ledger)
    original = ledger.get(2)
    updated = ledger.update(2, "29/02/2024", "Rent", 100)
    assert updated.id == original.id
    assert ledger.get(2) == ExpenseRecord(original.id, "29/02/2024", "Rent", 100.0)
    assert gateway.load_all()[1] == updated


@pytest.mark.parametrize("position", [0, 4, -1])
def test_update_out_of_range_changes_nothing(ledger, position):
    _seed(ledger)
    before = ledger.records()
    with pytest.raises(OutOfRangeError):
        ledger.update(position, "01/01/2024", "Food", 1)
    assert ledger.records() == before


def test_update_validates_inputs(ledger):
    _seed(ledger)
    before = ledger.records()
    with pytest.raises(NegativeAmountError):
        ledger.update(1, "01/01/2024", "Food", -3)
    with pytest.raises(InvalidDateError):
        ledger.update(1, "2024-01-01", "Food", 3)
    assert ledger.records() == before


def test_remove_updates_total(ledger, gateway):
    _seed(ledger)
    removed = ledger.remove(2)
    assert removed.category == "Travel"
    assert ledger.total() == 14.5
    assert [record.category for record in ledger] == ["Food", "food"]
    assert removed.id not in [record.id for record in gateway.load_all()]


def test_remove_out_of_range(ledger):
    with pytest.raises(OutOfRangeError):
        ledger.remove(1)


def test_positions_shift_after_remove(ledger):
    _seed(ledger)
    third = ledger.get(3)
    ledger.remove(1)
    # A position taken from the earlier listing now points at a different record.
    assert ledger.get(2) == third
    assert ledger.position_of(third.id) == 2


def test_position_of_unknown_identifier(ledger):
    with pytest.raises(OutOfRangeError):
        ledger.position_of(99)


def test_filter_by_category_is_case_insensitive(ledger):
    _seed(ledger)
    upper = ledger.filter_by_category("Food")
    lower = ledger.filter_by_category("food")
    assert upper == lower
    assert [record.date for record in upper] == ["01/01/2024", "03/01/2024"]
    assert ledger.positions_for_category("FOOD") == [1, 3]
    assert ledger.filter_by_category("Books") == []


def test_load_from_replaces_memory(gateway):
    gateway.create("01/01/2024", "Food", 3.0)
    gateway.create("02/01/2024", "Fuel", 7.0)
    ledger = Ledger(gateway)
    assert ledger.load_from() == 2
    assert ledger.total() == 10.0
    assert [record.category for record in ledger] == ["Food", "Fuel"]


def test_replace_all_does_not_touch_gateway(ledger, gateway):
    _seed(ledger)
    ledger.replace_all([])
    assert len(ledger) == 0
    assert len(gateway.load_all()) == 3


def test_clear_empties_memory_and_store(ledger, gateway):
    _seed(ledger)
    ledger.clear()
    assert len(ledger) == 0
    assert gateway.load_all() == []


def test_failed_create_rolls_back(flaky_gateway):
    ledger = Ledger(flaky_gateway)
    ledger.add("01/01/2024", "Food", 5)
    flaky_gateway.failing.add("create")
    with pytest.raises(PersistenceError):
        ledger.add("02/01/2024", "Food", 5)
    assert len(ledger) == 1
    assert ledger.total() == 5.0


def test_failed_update_rolls_back(flaky_gateway):
    ledger = Ledger(flaky_gateway)
    record = ledger.add("01/01/2024", "Food", 5)
    flaky_gateway.failing.add("update")
    with pytest.raises(PersistenceError):
        ledger.update(1, "02/01/2024", "Rent", 50)
    assert ledger.get(1) == record


def test_failed_delete_rolls_back(flaky_gateway):
    ledger = Ledger(flaky_gateway)
    ledger.add("01/01/2024", "Food", 5)
    ledger.add("02/01/2024", "Fuel", 6)
    flaky_gateway.failing.add("delete")
    with pytest.raises(PersistenceError):
        ledger.remove(1)
    assert [record.category for record in ledger] == ["Food", "Fuel"]


def test_update_of_row_missing_from_store_rolls_back(ledger, gateway):
    record = ledger.add("01/01/2024", "Food", 5)
    gateway.delete(record.id)
    with pytest.raises(PersistenceError):
        ledger.update(1, "02/01/2024", "Food", 9)
    assert ledger.get(1) == record
