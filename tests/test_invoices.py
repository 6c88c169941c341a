"""Tests for invoice mutations (service level and over HTTP)."""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from app.billing.models import AuditEvent
from app.billing.modules.invoices import repository as repo
from app.billing.modules.invoices.models import Invoice
from app.billing.modules.invoices.service import create_invoice, delete_invoice, update_invoice, utc_today
from app.billing.modules.invoices.validation import InvoiceInput
from app.billing.results import FAILED, NOT_FOUND, REJECTED, Redirect


def _create(db, invalidated, **fields) -> Invoice:
    result = create_invoice(db, InvoiceInput(**fields), invalidate=invalidated.append, today=date(2026, 10, 19))
    assert result == Redirect(target="/dashboard/invoices", message="Invoice created.")
    return db.query(Invoice).order_by(Invoice.id).all()[-1]


def test_create_stores_cents_and_date(db, invalidated):
    inv = _create(db, invalidated, customer_id="cust-1", amount="50.00", status="pending")

    assert inv.amount == 5000
    assert inv.status == "pending"
    assert inv.customer_id == "cust-1"
    assert inv.date == date(2026, 10, 19)
    assert invalidated == ["/dashboard/invoices"]
    assert db.query(AuditEvent).filter(AuditEvent.action == "invoice.create").count() == 1


def test_create_defaults_to_todays_date(db, invalidated):
    create_invoice(db, InvoiceInput(customer_id="c", amount="12.34", status="paid"), invalidate=invalidated.append)
    inv = db.query(Invoice).one()
    assert inv.amount == 1234
    assert inv.date == utc_today()


@pytest.mark.parametrize("amount", ["0", "-3", "abc", "", None])
def test_create_rejects_bad_amount(db, invalidated, amount):
    result = create_invoice(db, InvoiceInput(customer_id="c", amount=amount, status="paid"), invalidate=invalidated.append)

    assert result.outcome == REJECTED
    assert result.message == "Missing Fields. Failed to Create Invoice."
    assert list(result.errors) == ["amount"]
    assert db.query(Invoice).count() == 0
    assert invalidated == []


def test_create_db_failure(db, invalidated, monkeypatch):
    def boom(*args, **kwargs):
        raise IntegrityError("INSERT INTO invoices ...", {}, Exception("constraint"))

    monkeypatch.setattr(repo, "insert_invoice", boom)
    result = create_invoice(db, InvoiceInput(customer_id="c", amount="1", status="paid"), invalidate=invalidated.append)

    assert result.outcome == FAILED
    assert result.message == "Database Error: Failed to Create Invoice."
    assert db.query(AuditEvent).count() == 0
    assert invalidated == []


def test_update_replaces_fields_but_not_date(db, invalidated):
    inv = _create(db, invalidated, customer_id="c1", amount="50.00", status="pending")

    result = update_invoice(
        db, inv.id, InvoiceInput(customer_id="c2", amount="75.5", status="paid"), invalidate=invalidated.append
    )

    assert result == Redirect(target="/dashboard/invoices", message="Invoice updated.")
    db.expire_all()
    inv = db.get(Invoice, inv.id)
    assert (inv.customer_id, inv.amount, inv.status, inv.date) == ("c2", 7550, "paid", date(2026, 10, 19))


def test_update_invalid_leaves_row(db, invalidated):
    inv = _create(db, invalidated, customer_id="c1", amount="50.00", status="pending")

    result = update_invoice(db, inv.id, InvoiceInput(customer_id="c1", amount="0", status="paid"), invalidate=invalidated.append)

    assert result.outcome == REJECTED
    assert result.message == "Missing Fields. Failed to Update Invoice."
    db.expire_all()
    assert db.get(Invoice, inv.id).amount == 5000


def test_update_missing_invoice(db, invalidated):
    result = update_invoice(db, "nope", InvoiceInput(customer_id="c", amount="1", status="paid"), invalidate=invalidated.append)
    assert result.outcome == NOT_FOUND
    assert result.message == "Invoice not found."


def test_delete_is_idempotent(db, invalidated):
    inv = _create(db, invalidated, customer_id="c1", amount="1", status="paid")

    assert delete_invoice(db, inv.id, invalidate=invalidated.append).ok
    assert delete_invoice(db, inv.id, invalidate=invalidated.append).ok
    assert delete_invoice(db, "never-existed", invalidate=invalidated.append).ok
    assert db.query(Invoice).count() == 0


# ---------- HTTP ----------
def _new_customer(client) -> str:
    client.post("/dashboard/customers/create", data={"name": "Ada", "email": "ada@x.com"})
    return client.get("/dashboard/customers").json[0]["id"]


def test_http_create_redirects_and_lists(logged_in):
    cid = _new_customer(logged_in)

    r = logged_in.post("/dashboard/invoices/create", data={"customerId": cid, "amount": "50.00", "status": "pending"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard/invoices")

    rows = logged_in.get("/dashboard/invoices").json
    assert len(rows) == 1
    assert rows[0]["amount"] == 5000
    assert rows[0]["name"] == "Ada"
    assert rows[0]["date"] == utc_today().isoformat()


def test_http_create_invalid(logged_in):
    r = logged_in.post("/dashboard/invoices/create", data={"amount": "-1"})
    assert r.status_code == 400
    assert set(r.json["errors"]) == {"customerId", "amount", "status"}
    assert logged_in.get("/dashboard/invoices").json == []


def test_http_update_and_delete(logged_in):
    cid = _new_customer(logged_in)
    logged_in.post("/dashboard/invoices/create", data={"customerId": cid, "amount": "10", "status": "pending"})
    iid = logged_in.get("/dashboard/invoices").json[0]["id"]

    r = logged_in.post(f"/dashboard/invoices/{iid}/edit", data={"customerId": cid, "amount": "10", "status": "paid"})
    assert r.status_code == 302
    assert logged_in.get("/dashboard/invoices").json[0]["status"] == "paid"

    r = logged_in.post(f"/dashboard/invoices/{iid}/delete")
    assert r.status_code == 302
    assert logged_in.get("/dashboard/invoices").json == []


def test_http_customer_delete_leaves_invoices(logged_in):
    cid = _new_customer(logged_in)
    logged_in.post("/dashboard/invoices/create", data={"customerId": cid, "amount": "10", "status": "pending"})

    logged_in.post(f"/dashboard/customers/{cid}/delete")

    rows = logged_in.get("/dashboard/invoices").json
    assert len(rows) == 1
    assert rows[0]["customer_id"] == cid
    assert rows[0]["name"] is None
