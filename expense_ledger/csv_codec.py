"""CSV export and import in the flat ``S.No,Date,Type,Amount`` layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .exceptions import FileAccessError, MalformedRowError, PersistenceError, ValidationError
from .ledger import Ledger
from .models import CATEGORY_MAX_LENGTH, DATE_LENGTH, ExpenseRecord

logger = logging.getLogger(__name__)

CSV_HEADER = "S.No,Date,Type,Amount"
DEFAULT_CSV_PATH = Path("expensesfinal.csv")

PathLike = Union[Path, str]


@dataclass(frozen=True)
class CsvRow:
    line_number: int
    date: str
    category: str
    amount: float


@dataclass(frozen=True)
class SkippedRow:
    line_number: int
    text: str
    reason: str


@dataclass
class ExportReport:
    path: Path
    written: int = 0
    skipped: List[ExpenseRecord] = field(default_factory=list)


@dataclass
class ImportReport:
    path: Path
    imported: List[ExpenseRecord] = field(default_factory=list)
    skipped: List[SkippedRow] = field(default_factory=list)


def format_row(sequence: int, record: ExpenseRecord) -> str:
    return f"{sequence},{record.date},{record.category},{record.amount:.2f}"


def parse_row(line: str) -> Tuple[str, str, float]:
    """Parse one data line into ``(date, category, amount)``.

    The leading row number must be an integer but is otherwise ignored.
    """
    fields = line.split(",")
    if len(fields) != 4:
        raise MalformedRowError(f"expected 4 fields, found {len(fields)}")
    sequence, date, category, amount = fields
    try:
        int(sequence)
    except ValueError as exc:
        raise MalformedRowError(f"row number {sequence!r} is not an integer") from exc
    if not date or len(date) > DATE_LENGTH:
        raise MalformedRowError(f"date {date!r} must be 1-{DATE_LENGTH} characters")
    if not category or len(category) > CATEGORY_MAX_LENGTH:
        raise MalformedRowError(f"type {category!r} must be 1-{CATEGORY_MAX_LENGTH} characters")
    try:
        value = float(amount)
    except ValueError as exc:
        raise MalformedRowError(f"amount {amount!r} is not a number") from exc
    return date, category, value


def export_csv(records: Iterable[ExpenseRecord], path: PathLike = DEFAULT_CSV_PATH) -> ExportReport:
    """Write ``records`` to ``path`` with fresh 1-based row numbers."""
    report = ExportReport(path=Path(path))
    try:
        handle = report.path.open("w", encoding="utf-8", newline="")
    except OSError as exc:
        raise FileAccessError(f"Failed to create CSV file {report.path}") from exc

    try:
        with handle:
            handle.write(CSV_HEADER + "\n")
            for record in records:
                if not record.date or not record.category:
                    logger.warning("Skipping expense %s with empty fields", record.id)
                    report.skipped.append(record)
                    continue
                report.written += 1
                handle.write(format_row(report.written, record) + "\n")
    except OSError as exc:
        logger.error("Export to %s failed after %d rows: %s", report.path, report.written, exc)
        raise FileAccessError(f"Failed to write CSV file {report.path}") from exc

    logger.info("Exported %d expenses to %s", report.written, report.path)
    return report


def decode_line(raw: bytes) -> str:
    """Decode one raw line as UTF-8 without its trailing CR/LF."""
    try:
        return raw.decode("utf-8").rstrip("\r\n")
    except UnicodeDecodeError as exc:
        raise MalformedRowError(f"line is not valid UTF-8 (byte {exc.start})") from exc


def read_csv(path: PathLike = DEFAULT_CSV_PATH) -> Tuple[List[CsvRow], List[SkippedRow]]:
    """Parse every data line of ``path``; unparseable lines are collected, not raised."""
    rows: List[CsvRow] = []
    skipped: List[SkippedRow] = []
    try:
        handle = Path(path).open("rb")
    except OSError as exc:
        raise FileAccessError(f"Could not open {path} for import") from exc

    try:
        with handle:
            handle.readline()  # header
            for line_number, raw in enumerate(handle, start=2):
                try:
                    line = decode_line(raw)
                    if not line.strip():
                        continue
                    date, category, amount = parse_row(line)
                except MalformedRowError as exc:
                    text = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                    logger.warning("Skipping invalid line %d: %s (%s)", line_number, text, exc)
                    skipped.append(SkippedRow(line_number, text, str(exc)))
                    continue
                rows.append(CsvRow(line_number, date, category, amount))
    except OSError as exc:
        raise FileAccessError(f"Failed to read {path}") from exc
    return rows, skipped


def import_csv(ledger: Ledger, path: PathLike = DEFAULT_CSV_PATH) -> ImportReport:
    """Replace the ledger and its store with the contents of ``path``.

    The file is read before anything is cleared, so an unreadable file leaves
    existing data untouched. Rows the ledger rejects are reported as skipped.
    """
    report = ImportReport(path=Path(path))
    rows, skipped = read_csv(report.path)
    report.skipped.extend(skipped)

    ledger.clear()
    for row in rows:
        try:
            report.imported.append(ledger.add(row.date, row.category, row.amount))
        except ValidationError as exc:
            text = f"{row.date},{row.category},{row.amount}"
            logger.warning("Skipping invalid line %d: %s (%s)", row.line_number, text, exc)
            report.skipped.append(SkippedRow(row.line_number, text, str(exc)))
        except PersistenceError:
            logger.error("Import from %s stopped after %d rows", report.path, len(report.imported))
            raise

    report.skipped.sort(key=lambda skipped_row: skipped_row.line_number)
    logger.info(
        "Imported %d expenses from %s (%d skipped)",
        len(report.imported),
        report.path,
        len(report.skipped),
    )
    return report
