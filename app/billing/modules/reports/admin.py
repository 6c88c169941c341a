from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from app.billing.db import db_session
from app.billing.errors import BadRequestError
from app.billing.modules.invoices.validation import parse_amount, to_cents
from app.billing.modules.reports.service import run_report
from app.billing.rbac import require_permission

bp = Blueprint("reports", __name__)
logger = logging.getLogger(__name__)


def _amount_filter() -> int:
    """?amount=<decimal> overrides the configured fixed filter."""
    raw = request.args.get("amount")
    if raw is None:
        return int(current_app.config["REPORT_INVOICE_AMOUNT_CENTS"])
    amount, error = parse_amount(raw)
    if amount is None:
        raise BadRequestError(f"Invalid amount parameter: {error}")
    return to_cents(amount)


@bp.get("/query")
@require_permission("reports.view")
def query():
    report_type = (request.args.get("type") or "").strip() or None
    try:
        rows = run_report(db_session(), report_type, amount_cents=_amount_filter())
    except BadRequestError as e:
        return jsonify({"error": e.message}), 400
    except SQLAlchemyError:
        logger.exception("Report query failed (type=%s)", report_type)
        return jsonify({"error": "Failed to run report."}), 500
    return jsonify(rows)
