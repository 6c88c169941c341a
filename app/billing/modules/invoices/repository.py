from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from app.billing.errors import NotFoundError
from app.billing.modules.customers.models import Customer
from app.billing.modules.invoices.models import Invoice


def get_invoice(s: Session, invoice_id: str) -> Invoice | None:
    return s.get(Invoice, invoice_id)


def list_invoices(s: Session) -> list[tuple[Invoice, Customer | None]]:
    """Newest first, each with its customer (None for orphaned invoices)."""
    return (
        s.query(Invoice, Customer)
        .outerjoin(Customer, Invoice.customer_id == Customer.id)
        .order_by(Invoice.date.desc(), Invoice.id.asc())
        .all()
    )


def insert_invoice(s: Session, *, customer_id: str, amount_cents: int, status: str, date: date) -> str:
    inv = Invoice(customer_id=customer_id, amount=amount_cents, status=status, date=date)
    s.add(inv)
    s.flush()
    return inv.id


def update_invoice(s: Session, invoice_id: str, *, customer_id: str, amount_cents: int, status: str) -> Invoice:
    """Replace customer/amount/status; the date is left as created."""
    inv = get_invoice(s, invoice_id)
    if inv is None:
        raise NotFoundError(f"Invoice {invoice_id} not found.")
    inv.customer_id = customer_id
    inv.amount = amount_cents
    inv.status = status
    s.flush()
    return inv


def delete_invoice(s: Session, invoice_id: str) -> int:
    return s.query(Invoice).filter(Invoice.id == invoice_id).delete(synchronize_session=False)
