from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.billing.cache import view_cache
from app.billing.constants import INVOICES_PATH
from app.billing.db import db_session
from app.billing.modules.invoices.repository import list_invoices
from app.billing.modules.invoices.service import create_invoice, delete_invoice, update_invoice
from app.billing.modules.invoices.validation import InvoiceInput
from app.billing.rbac import require_permission
from app.billing.utils import current_user, render_result

bp = Blueprint("invoices", __name__)


def _invoice_input() -> InvoiceInput:
    return InvoiceInput(
        customer_id=request.form.get("customerId"),
        amount=request.form.get("amount"),
        status=request.form.get("status"),
    )


def _invoice_rows(s) -> list[dict]:
    return [
        {
            "id": inv.id,
            "customer_id": inv.customer_id,
            "name": c.name if c else None,
            "email": c.email if c else None,
            "image_url": c.image_url if c else None,
            "amount": inv.amount,
            "status": inv.status,
            "date": inv.date.isoformat(),
        }
        for inv, c in list_invoices(s)
    ]


@bp.get("/invoices")
@require_permission("invoices.view")
def invoices_list():
    s = db_session()
    return jsonify(view_cache().get_or_compute(s, INVOICES_PATH, lambda: _invoice_rows(s)))


@bp.post("/invoices/create")
@require_permission("invoices.create")
def invoices_create_post():
    result = create_invoice(
        db_session(),
        _invoice_input(),
        invalidate=view_cache().invalidator(db_session()),
        actor=current_user(),
    )
    return render_result(result)


@bp.post("/invoices/<invoice_id>/edit")
@require_permission("invoices.edit")
def invoice_edit_post(invoice_id: str):
    result = update_invoice(
        db_session(),
        invoice_id,
        _invoice_input(),
        invalidate=view_cache().invalidator(db_session()),
        actor=current_user(),
    )
    return render_result(result)


@bp.post("/invoices/<invoice_id>/delete")
@require_permission("invoices.delete")
def invoice_delete_post(invoice_id: str):
    result = delete_invoice(
        db_session(),
        invoice_id,
        invalidate=view_cache().invalidator(db_session()),
        actor=current_user(),
    )
    return render_result(result)
