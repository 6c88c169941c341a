from __future__ import annotations

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.billing.errors import BadRequestError
from app.billing.modules.customers.models import Customer
from app.billing.modules.invoices.models import Invoice

REPORT_TYPES = ("invoices", "customers")
INVALID_TYPE_MESSAGE = "Invalid or missing type parameter (use ?type=invoices or ?type=customers)"


def report_invoices_by_amount(s: Session, amount_cents: int) -> list[dict]:
    """Invoices of exactly `amount_cents`, with the owning customer's name."""
    rows = (
        s.query(Invoice.amount, Customer.name)
        .join(Customer, Invoice.customer_id == Customer.id)
        .filter(Invoice.amount == amount_cents)
        .order_by(Customer.name.asc(), Invoice.date.asc(), Invoice.id.asc())
        .all()
    )
    return [{"amount": int(amount), "name": name} for amount, name in rows]


def report_customer_totals(s: Session) -> list[dict]:
    """
    One row per customer (name A-Z): invoice count plus pending and paid sums.
    Customers without invoices report zeros, never NULL.
    """
    total_pending = func.coalesce(
        func.sum(case((Invoice.status == "pending", Invoice.amount), else_=0)), 0
    )
    total_paid = func.coalesce(
        func.sum(case((Invoice.status == "paid", Invoice.amount), else_=0)), 0
    )
    rows = (
        s.query(
            Customer.id,
            Customer.name,
            Customer.email,
            Customer.image_url,
            func.count(Invoice.id).label("total_invoices"),
            total_pending.label("total_pending"),
            total_paid.label("total_paid"),
        )
        .outerjoin(Invoice, Customer.id == Invoice.customer_id)
        .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
        .order_by(Customer.name.asc(), Customer.id.asc())
        .all()
    )
    return [
        {
            "id": r.id,
            "name": r.name,
            "email": r.email,
            "image_url": r.image_url,
            "total_invoices": int(r.total_invoices or 0),
            "total_pending": int(r.total_pending or 0),
            "total_paid": int(r.total_paid or 0),
        }
        for r in rows
    ]


def run_report(s: Session, report_type: str | None, *, amount_cents: int) -> list[dict]:
    """Dispatch on the report type. Raises BadRequestError for anything else."""
    if report_type == "invoices":
        return report_invoices_by_amount(s, amount_cents)
    if report_type == "customers":
        return report_customer_totals(s)
    raise BadRequestError(INVALID_TYPE_MESSAGE)
