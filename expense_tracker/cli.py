"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from expense_ledger.budget import BudgetWarning
from expense_ledger.config import Settings
from expense_ledger.exceptions import (
    BudgetExceededError,
    FileAccessError,
    NegativeAmountError,
    OutOfRangeError,
    PersistenceError,
    ValidationError,
)
from expense_ledger.logging_config import setup_logging
from expense_ledger.models import DATE_FORMAT, ExpenseRecord
from expense_ledger.services import ExpenseTracker
from expense_ledger.validators import (
    is_valid_date,
    parse_amount,
    parse_ceiling,
    validate_category,
)

InputFn = Callable[[str], str]

MENU = """
==== Expense Tracker ====
1. Set Budget
2. Add Expense
3. Edit Expense
4. Delete Expense
5. View All Expenses
6. View Expenses by Category
7. View Total
8. Export to CSV
9. Import from CSV
10. Exit
========================="""

EXIT_CHOICE = 10


def _parse_date(value: str) -> str:
    if not is_valid_date(value):
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format {DATE_FORMAT}."
        )
    return value


def _parse_amount(value: str) -> float:
    try:
        return parse_amount(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_budget(value: str) -> Optional[float]:
    try:
        return parse_ceiling(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _format_header() -> str:
    return f"{'S.No':<5} {'Date':<15} {'Type':<15} {'Amount':<10}"


def _format_row(position: int, record: ExpenseRecord) -> str:
    return f"{position:<5d} {record.date:<15} {record.category:<15} Rs{record.amount:.2f}"


def _print_rows(rows: Iterable[tuple]) -> None:
    print(_format_header())
    for position, record in rows:
        print(_format_row(position, record))


def _print_remaining(tracker: ExpenseTracker, prefix: str) -> None:
    remaining = tracker.remaining()
    if remaining is None:
        print(f"{prefix}.")
    else:
        print(f"{prefix}. Remaining Budget: Rs{remaining:.2f}")


# Interactive prompts ------------------------------------------------------
def _prompt_date(read: InputFn, label: str) -> str:
    while True:
        value = read(f"Enter {label} ({DATE_FORMAT}): ").strip()
        if is_valid_date(value):
            return value
        print("Invalid date format or value. Try again.")


def _prompt_category(read: InputFn, label: str) -> str:
    while True:
        try:
            return validate_category(read(f"Enter {label}: "))
        except ValidationError as exc:
            print(f"Invalid type: {exc}. Try again.")


def _prompt_amount(read: InputFn, label: str) -> float:
    while True:
        try:
            return parse_amount(read(f"Enter {label}: "))
        except NegativeAmountError:
            print("Amount cannot be negative.")
        except ValidationError:
            print("Amount must be a number.")


def _prompt_position(read: InputFn, action: str) -> Optional[int]:
    raw = read(f"Enter S.No. to {action}: ").strip()
    try:
        return int(raw)
    except ValueError:
        print("Invalid S.No.")
        return None


# Menu actions -------------------------------------------------------------
def view_expenses(tracker: ExpenseTracker) -> None:
    records = tracker.ledger.records()
    if not records:
        print("No expenses recorded.")
        return
    _print_rows(enumerate(records, start=1))


def view_by_category(tracker: ExpenseTracker, read: InputFn) -> None:
    if not len(tracker.ledger):
        print("No expenses recorded.")
        return
    name = read("Enter the category to search for: ").strip()
    positions = tracker.ledger.positions_for_category(name)
    if not positions:
        print(f"No expenses found for category '{name}'.")
        return
    # Positions refer to the full listing so they can be used for edit/delete.
    _print_rows((position, tracker.ledger.get(position)) for position in positions)


def view_total(tracker: ExpenseTracker) -> None:
    print(f"Total Expense: Rs{tracker.total():.2f}")


def set_budget(tracker: ExpenseTracker, read: InputFn) -> None:
    try:
        ceiling = tracker.set_budget(read("Enter your budget: Rs"))
    except ValidationError as exc:
        print(f"Invalid budget: {exc}")
        return
    if ceiling is None:
        print("Budget cleared; no limit is enforced.")
    else:
        print(f"Budget set to Rs{ceiling:.2f}")


def add_expense(tracker: ExpenseTracker, read: InputFn) -> None:
    if tracker.budget.check_before_add(tracker.total(), 0.0) is BudgetWarning.CURRENTLY_OVER:
        print("WARNING: You have exceeded your budget! Set a new budget first.")
        return
    date = _prompt_date(read, "date")
    category = _prompt_category(read, "type of expense")
    amount = _prompt_amount(read, "amount")
    try:
        tracker.add_expense(date, category, amount)
    except BudgetExceededError as exc:
        if exc.warning is BudgetWarning.WOULD_EXCEED:
            print("WARNING: This expense exceeds your budget!")
        else:
            print(f"WARNING: {exc}")
        return
    except PersistenceError as exc:
        print(f"Storage error: {exc}. The expense was not added.")
        return
    _print_remaining(tracker, "Expense added")


def edit_expense(tracker: ExpenseTracker, read: InputFn) -> None:
    view_expenses(tracker)
    position = _prompt_position(read, "edit")
    if position is None:
        return
    try:
        tracker.ledger.get(position)
    except OutOfRangeError:
        print("Invalid S.No.")
        return
    date = _prompt_date(read, "new date")
    category = _prompt_category(read, "new type")
    amount = _prompt_amount(read, "new amount")
    try:
        tracker.edit_expense(position, date, category, amount)
    except PersistenceError as exc:
        print(f"Storage error: {exc}. The expense was not changed.")
        return
    print("Expense updated successfully.")


def delete_expense(tracker: ExpenseTracker, read: InputFn) -> None:
    view_expenses(tracker)
    position = _prompt_position(read, "delete")
    if position is None:
        return
    try:
        tracker.delete_expense(position)
    except OutOfRangeError:
        print("Invalid S.No.")
        return
    except PersistenceError as exc:
        print(f"Storage error: {exc}. The expense was not deleted.")
        return
    _print_remaining(tracker, "Expense deleted")


def export_expenses(tracker: ExpenseTracker) -> None:
    try:
        report = tracker.export_csv()
    except FileAccessError as exc:
        print(str(exc))
        return
    for record in report.skipped:
        print(f"Skipping invalid expense entry {record.id} with empty fields.")
    print(f"Expenses exported to {report.path}")


def import_expenses(tracker: ExpenseTracker) -> None:
    try:
        report = tracker.import_csv()
    except FileAccessError as exc:
        print(str(exc))
        return
    except PersistenceError as exc:
        print(f"Storage error: {exc}")
        return
    for row in report.skipped:
        print(f"Skipping invalid line {row.line_number}: {row.text}")
    print(f"Expenses imported from {report.path} ({len(report.imported)} records)")


def run_menu(tracker: ExpenseTracker, read: InputFn = input) -> int:
    """Run the numbered menu until the user exits or input ends."""
    actions = {
        1: lambda: set_budget(tracker, read),
        2: lambda: add_expense(tracker, read),
        3: lambda: edit_expense(tracker, read),
        4: lambda: delete_expense(tracker, read),
        5: lambda: view_expenses(tracker),
        6: lambda: view_by_category(tracker, read),
        7: lambda: view_total(tracker),
        8: lambda: export_expenses(tracker),
        9: lambda: import_expenses(tracker),
    }
    try:
        while True:
            print(MENU)
            raw = read("Choose an option: ").strip()
            try:
                choice = int(raw)
            except ValueError:
                choice = -1
            if choice == EXIT_CHOICE:
                return 0
            action = actions.get(choice)
            if action is None:
                print("Invalid option.")
                continue
            action()
    except (EOFError, KeyboardInterrupt):
        print()
        return 0


# One-shot commands --------------------------------------------------------
def handle_command(args: argparse.Namespace, tracker: ExpenseTracker) -> None:
    if args.command == "add":
        record = tracker.add_expense(args.date, args.category, args.amount)
        print(f"Expense added:\n{_format_header()}\n{_format_row(len(tracker.ledger), record)}")
    elif args.command == "edit":
        record = tracker.edit_expense(args.position, args.date, args.category, args.amount)
        print(f"Expense updated:\n{_format_header()}\n{_format_row(args.position, record)}")
    elif args.command == "delete":
        record = tracker.delete_expense(args.position)
        print(f"Expense {args.position} ({record.date} {record.category}) deleted.")
    elif args.command == "list":
        if args.category:
            positions = tracker.ledger.positions_for_category(args.category)
            if not positions:
                print(f"No expenses found for category '{args.category}'.")
                return
            _print_rows((position, tracker.ledger.get(position)) for position in positions)
        else:
            view_expenses(tracker)
    elif args.command == "total":
        view_total(tracker)
        remaining = tracker.remaining()
        if remaining is not None:
            print(f"Remaining Budget: Rs{remaining:.2f}")
    elif args.command == "export":
        report = tracker.export_csv(args.file)
        print(f"Exported {report.written} expenses to {report.path}")
    elif args.command == "import":
        report = tracker.import_csv(args.file)
        for row in report.skipped:
            print(f"Skipping invalid line {row.line_number}: {row.text}", file=sys.stderr)
        print(f"Imported {len(report.imported)} expenses from {report.path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Tracker CLI")
    parser.add_argument("--db", type=Path, help="SQLite database file (default: expensesfinal.db)")
    parser.add_argument("--csv", type=Path, help="CSV file for export/import (default: expensesfinal.csv)")
    parser.add_argument("--budget", type=_parse_budget, help="Budget ceiling for this session")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("menu", help="Interactive menu (default)")

    add = subparsers.add_parser("add", help="Add a new expense")
    add.add_argument("date", type=_parse_date)
    add.add_argument("category")
    add.add_argument("amount", type=_parse_amount)

    edit = subparsers.add_parser("edit", help="Replace the expense at a listed S.No")
    edit.add_argument("position", type=int)
    edit.add_argument("date", type=_parse_date)
    edit.add_argument("category")
    edit.add_argument("amount", type=_parse_amount)

    delete = subparsers.add_parser("delete", help="Delete the expense at a listed S.No")
    delete.add_argument("position", type=int)

    listing = subparsers.add_parser("list", help="List expenses")
    listing.add_argument("--category")

    subparsers.add_parser("total", help="Show total spent and remaining budget")

    export = subparsers.add_parser("export", help="Export expenses to CSV")
    export.add_argument("--file", type=Path)

    import_ = subparsers.add_parser("import", help="Replace all expenses with a CSV file")
    import_.add_argument("--file", type=Path)

    return parser


def main(argv: Optional[Sequence[str]] = None, read: InputFn = input) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    setup_logging(args.log_level or settings.log_level)

    try:
        tracker = ExpenseTracker.open(
            args.db or settings.db_path,
            args.csv or settings.csv_path,
            ceiling=args.budget,
        )
    except PersistenceError as exc:
        print(f"Can't open database: {exc}", file=sys.stderr)
        return 1

    with tracker:
        if args.command in (None, "menu"):
            return run_menu(tracker, read)
        try:
            handle_command(args, tracker)
        except ValidationError as exc:
            print(f"Validation error: {exc}", file=sys.stderr)
            return 1
        except OutOfRangeError as exc:
            print(f"Invalid S.No: {exc}", file=sys.stderr)
            return 1
        except BudgetExceededError as exc:
            print(f"Budget exceeded: {exc}", file=sys.stderr)
            return 1
        except FileAccessError as exc:
            print(f"File error: {exc}", file=sys.stderr)
            return 1
        except PersistenceError as exc:
            print(f"Storage error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
