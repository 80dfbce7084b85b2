"""Flask REST API exposing the expense ledger."""

from __future__ import annotations

import atexit
import threading
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from expense_ledger.config import Settings
from expense_ledger.exceptions import (
    BudgetExceededError,
    FileAccessError,
    OutOfRangeError,
    PersistenceError,
    ValidationError,
)
from expense_ledger.models import ExpenseRecord
from expense_ledger.services import ExpenseTracker


def create_app(
    db_path: Optional[Path] = None,
    csv_path: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    tracker = ExpenseTracker.open(
        str(db_path or settings.db_path),
        csv_path or settings.csv_path,
    )
    app.extensions["expense_tracker"] = tracker
    atexit.register(tracker.close)

    # The ledger and its budget check are not thread-safe; handle one call at a time.
    lock = threading.Lock()

    def _serialized(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            with lock:
                return view(*args, **kwargs)

        return wrapper

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(OutOfRangeError)
    def handle_out_of_range(exc: OutOfRangeError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(BudgetExceededError)
    def handle_budget_exceeded(exc: BudgetExceededError):
        app.logger.warning("Budget exceeded: %s", exc)
        return jsonify({"error": "Budget exceeded", "kind": exc.warning.value, "details": str(exc)}), 409

    @app.errorhandler(FileAccessError)
    def handle_file_access_error(exc: FileAccessError):
        return _handle_error(exc, 400, "File access error")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _item(position: int, record: ExpenseRecord) -> Dict[str, Any]:
        return {"position": position, **record.to_dict()}

    def _totals() -> Dict[str, Any]:
        remaining = tracker.remaining()
        return {
            "total": f"{tracker.total():.2f}",
            "remaining": None if remaining is None else f"{remaining:.2f}",
        }

    @app.get("/expenses")
    @_serialized
    def list_expenses():
        category = request.args.get("category")
        ledger = tracker.ledger
        if category:
            positions = ledger.positions_for_category(category)
        else:
            positions = range(1, len(ledger) + 1)
        items = [_item(position, ledger.get(position)) for position in positions]
        return _success({"items": items, **_totals()})

    @app.post("/expenses")
    @_serialized
    def create_expense():
        payload = _json_body()
        record = tracker.add_expense(payload.get("date"), payload.get("category"), payload.get("amount"))
        return _success(_item(len(tracker.ledger), record), 201)

    @app.get("/expenses/<int:position>")
    @_serialized
    def get_expense(position: int):
        return _success(_item(position, tracker.ledger.get(position)))

    @app.put("/expenses/<int:position>")
    @_serialized
    def update_expense(position: int):
        payload = _json_body()
        record = tracker.edit_expense(
            position, payload.get("date"), payload.get("category"), payload.get("amount")
        )
        return _success(_item(position, record))

    @app.delete("/expenses/<int:position>")
    @_serialized
    def delete_expense(position: int):
        tracker.delete_expense(position)
        return _success({}, 204)

    @app.get("/budget")
    @_serialized
    def get_budget():
        ceiling = tracker.budget.ceiling
        return _success({"ceiling": None if ceiling is None else f"{ceiling:.2f}", **_totals()})

    @app.put("/budget")
    @_serialized
    def set_budget():
        payload = _json_body()
        ceiling = tracker.set_budget(payload.get("ceiling"))
        return _success({"ceiling": None if ceiling is None else f"{ceiling:.2f}", **_totals()})

    @app.get("/total")
    @_serialized
    def total():
        return _success(_totals())

    @app.post("/export")
    @_serialized
    def export_expenses():
        report = tracker.export_csv()
        return _success({"path": str(report.path), "written": report.written})

    @app.post("/import")
    @_serialized
    def import_expenses():
        report = tracker.import_csv()
        return _success({
            "path": str(report.path),
            "imported": len(report.imported),
            "skipped": [
                {"line": row.line_number, "text": row.text, "reason": row.reason}
                for row in report.skipped
            ],
        })

    return app
