from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from app.billing.audit import record_event
from app.billing.constants import INVOICES_PATH
from app.billing.db import atomic
from app.billing.errors import NotFoundError, StorageWriteError
from app.billing.models import User
from app.billing.modules.invoices import repository as repo
from app.billing.modules.invoices.validation import InvoiceInput, validate_invoice
from app.billing.results import MutationResult, Redirect, failed, not_found, rejected

logger = logging.getLogger(__name__)

Invalidate = Callable[[str], None]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def create_invoice(
    s: Session,
    data: InvoiceInput,
    *,
    invalidate: Invalidate,
    actor: User | None = None,
    today: date | None = None,
) -> MutationResult:
    """Validate, store amount in cents with today's date, then go to the listing."""
    invoice, errors = validate_invoice(data)
    if invoice is None:
        return rejected(errors, "Missing Fields. Failed to Create Invoice.")

    amount_cents = invoice.amount_cents
    invoice_date = today or utc_today()
    try:
        with atomic(s):
            invoice_id = repo.insert_invoice(
                s,
                customer_id=invoice.customer_id,
                amount_cents=amount_cents,
                status=invoice.status,
                date=invoice_date,
            )
            record_event(
                s,
                actor=actor,
                action="invoice.create",
                entity_type="Invoice",
                entity_id=invoice_id,
                metadata={"customer_id": invoice.customer_id, "amount": amount_cents, "status": invoice.status},
            )
            invalidate(INVOICES_PATH)
    except StorageWriteError:
        logger.exception("Database Error: failed to create invoice (customer_id=%s)", invoice.customer_id)
        return failed("Database Error: Failed to Create Invoice.")

    return Redirect(target=INVOICES_PATH, message="Invoice created.")


def update_invoice(
    s: Session,
    invoice_id: str,
    data: InvoiceInput,
    *,
    invalidate: Invalidate,
    actor: User | None = None,
) -> MutationResult:
    invoice, errors = validate_invoice(data)
    if invoice is None:
        return rejected(errors, "Missing Fields. Failed to Update Invoice.")

    amount_cents = invoice.amount_cents
    try:
        with atomic(s):
            repo.update_invoice(
                s,
                invoice_id,
                customer_id=invoice.customer_id,
                amount_cents=amount_cents,
                status=invoice.status,
            )
            record_event(
                s,
                actor=actor,
                action="invoice.edit",
                entity_type="Invoice",
                entity_id=invoice_id,
                metadata={"customer_id": invoice.customer_id, "amount": amount_cents, "status": invoice.status},
            )
            invalidate(INVOICES_PATH)
    except NotFoundError:
        logger.warning("Update of missing invoice %s", invoice_id)
        return not_found("Invoice not found.")
    except StorageWriteError:
        logger.exception("Database Error: failed to update invoice %s", invoice_id)
        return failed("Database Error: Failed to Update Invoice.")

    return Redirect(target=INVOICES_PATH, message="Invoice updated.")


def delete_invoice(
    s: Session,
    invoice_id: str,
    *,
    invalidate: Invalidate,
    actor: User | None = None,
) -> MutationResult:
    try:
        with atomic(s):
            if repo.delete_invoice(s, invoice_id):
                record_event(s, actor=actor, action="invoice.delete", entity_type="Invoice", entity_id=invoice_id)
            invalidate(INVOICES_PATH)
    except StorageWriteError:
        logger.exception("Database Error: failed to delete invoice %s", invoice_id)
        return failed("Database Error: Failed to Delete Invoice.")

    return Redirect(target=INVOICES_PATH, message="Invoice deleted.")
