"""In-memory expense ledger mirrored to a persistence gateway."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Iterator, List, Optional

from .exceptions import OutOfRangeError, PersistenceError, RecordNotFoundError
from .models import ExpenseRecord
from .storage import PersistenceGateway
from .validators import parse_amount, validate_category, validate_date

logger = logging.getLogger(__name__)


class Ledger:
    """Ordered collection of expense records.

    Records keep insertion order and are addressed by their 1-based position
    in that order (the "S.No" shown in listings). Positions shift after every
    add, remove or import, so a position is only meaningful against the
    listing taken immediately before it is used. :meth:`position_of` maps a
    stable store identifier back to its current position.

    Every mutation is mirrored to the gateway. When the gateway fails the
    in-memory change is undone and :class:`PersistenceError` is raised.
    """

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway
        self._records: List[ExpenseRecord] = []

    # Public API -----------------------------------------------------------
    def add(self, date: object, category: object, amount: object) -> ExpenseRecord:
        record = ExpenseRecord(id=0, **self._validate(date, category, amount))
        self._records.append(record)
        try:
            record_id = self._gateway.create(record.date, record.category, record.amount)
        except PersistenceError:
            self._records.pop()
            raise
        saved = replace(record, id=record_id)
        self._records[-1] = saved
        logger.debug("Added expense %s at position %d", record_id, len(self._records))
        return saved

    def update(self, position: int, date: object, category: object, amount: object) -> ExpenseRecord:
        index = self._index_or_raise(position)
        existing = self._records[index]
        updated = replace(existing, **self._validate(date, category, amount))
        self._records[index] = updated
        try:
            self._gateway.update(updated.id, updated.date, updated.category, updated.amount)
        except (PersistenceError, RecordNotFoundError) as exc:
            self._records[index] = existing
            if isinstance(exc, RecordNotFoundError):
                raise PersistenceError(f"Store has no row for expense {existing.id}") from exc
            raise
        logger.debug("Updated expense %s at position %d", updated.id, position)
        return updated

    def remove(self, position: int) -> ExpenseRecord:
        index = self._index_or_raise(position)
        record = self._records.pop(index)
        try:
            self._gateway.delete(record.id)
        except (PersistenceError, RecordNotFoundError) as exc:
            self._records.insert(index, record)
            if isinstance(exc, RecordNotFoundError):
                raise PersistenceError(f"Store has no row for expense {record.id}") from exc
            raise
        logger.debug("Removed expense %s from position %d", record.id, position)
        return record

    def get(self, position: int) -> ExpenseRecord:
        return self._records[self._index_or_raise(position)]

    def position_of(self, record_id: int) -> int:
        for index, record in enumerate(self._records, start=1):
            if record.id == record_id:
                return index
        raise OutOfRangeError(f"Expense {record_id} is not in the ledger")

    def records(self) -> List[ExpenseRecord]:
        """Return a snapshot of the current listing."""
        return list(self._records)

    def total(self) -> float:
        return sum((record.amount for record in self._records), 0.0)

    def filter_by_category(self, name: str) -> List[ExpenseRecord]:
        canonical = name.strip().lower()
        return [record for record in self._records if record.category.lower() == canonical]

    def positions_for_category(self, name: str) -> List[int]:
        canonical = name.strip().lower()
        return [
            index
            for index, record in enumerate(self._records, start=1)
            if record.category.lower() == canonical
        ]

    def replace_all(self, records: Iterable[ExpenseRecord]) -> None:
        """Adopt ``records`` as the whole listing without touching the gateway."""
        self._records = list(records)

    def load_from(self, gateway: Optional[PersistenceGateway] = None) -> int:
        """Replace the listing with everything the gateway has persisted."""
        source = gateway if gateway is not None else self._gateway
        self.replace_all(source.load_all())
        logger.info("Loaded %d expenses from storage", len(self._records))
        return len(self._records)

    def clear(self) -> None:
        """Delete every record from the gateway, then from memory."""
        self._gateway.clear_all()
        self._records = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ExpenseRecord]:
        return iter(list(self._records))

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    # Internal helpers -----------------------------------------------------
    def _index_or_raise(self, position: int) -> int:
        if isinstance(position, bool) or not isinstance(position, int):
            raise OutOfRangeError(f"Invalid S.No {position!r}")
        if not 1 <= position <= len(self._records):
            raise OutOfRangeError(
                f"S.No {position} is out of range (1-{len(self._records)})"
                if self._records
                else "No expenses recorded"
            )
        return position - 1

    @staticmethod
    def _validate(date: object, category: object, amount: object) -> dict:
        return {
            "date": validate_date(date),
            "category": validate_category(category),
            "amount": parse_amount(amount),
        }
