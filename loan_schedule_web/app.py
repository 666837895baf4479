import logging
import os

import click
from flask import Flask, jsonify, request

from loan_schedule.engine import compute_schedule
from loan_schedule.logging_config import setup_logging
from loan_schedule.main import build_terms_from_options


def parse_preview_rows(value: str) -> int:
    """Validate the number of schedule rows returned without a full-schedule request."""
    try:
        rows = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"LOAN_SCHEDULE_PREVIEW_ROWS must be an integer; got {value!r}")
    if rows < 0:
        raise ValueError(f"LOAN_SCHEDULE_PREVIEW_ROWS cannot be negative; got {rows}")
    return rows


app = Flask(__name__)
app.config["PREVIEW_ROWS"] = parse_preview_rows(os.environ.get("LOAN_SCHEDULE_PREVIEW_ROWS", "120"))
app.config["LOG_LEVEL"] = os.environ.get("LOAN_SCHEDULE_LOG_LEVEL", "INFO")
setup_logging(app.config["LOG_LEVEL"])

logger = logging.getLogger("loan_schedule.web")


def _request_values() -> dict:
    """Return submitted fields from either a JSON body or a form."""
    if request.is_json:
        payload = request.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}
    return request.form.to_dict()


def _is_truthy(value) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _values_to_terms(values: dict):
    term = values.get("term", "")
    if isinstance(term, bool) or (isinstance(term, float) and not term.is_integer()):
        raise ValueError(f"Invalid term: {term}")
    try:
        term = int(term)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid term: {term}")
    return build_terms_from_options(
        str(values.get("principal", "")).strip(),
        str(values.get("rate", "0")).strip(),
        term,
        str(values.get("frequency", "monthly")).strip() or "monthly",
        str(values.get("start_date", "")).strip(),
    )


def _summaries_for_view(summary: dict, schedule: list, show_full_schedule: bool):
    if show_full_schedule:
        return summary, schedule
    preview_rows = app.config["PREVIEW_ROWS"]
    preview = schedule[:preview_rows]
    if len(schedule) > preview_rows:
        summary["truncated"] = len(schedule) - len(preview)
    return summary, preview


def _error(message: str):
    logger.info("Rejected loan terms: %s", message)
    return jsonify({"error": message}), 400


@app.post("/api/schedule")
def schedule_preview():
    values = _request_values()
    try:
        terms = _values_to_terms(values)
    except click.ClickException as exc:
        return _error(exc.format_message())
    except ValueError as exc:
        return _error(str(exc))

    amortization, summary = compute_schedule(terms)
    serialized = [entry.to_dict() for entry in amortization.installments]
    summary, schedule_view = _summaries_for_view(
        summary, serialized, _is_truthy(values.get("show_full_schedule", ""))
    )
    return jsonify({"summary": summary, "schedule": schedule_view})


@app.post("/api/summary")
def summary_preview():
    try:
        terms = _values_to_terms(_request_values())
    except click.ClickException as exc:
        return _error(exc.format_message())
    except ValueError as exc:
        return _error(str(exc))

    _, summary = compute_schedule(terms)
    return jsonify({"summary": summary})


@app.get("/api/health")
def health():
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    print("Starting loan schedule preview API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
