from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from app.billing.cache import view_cache
from app.billing.constants import CUSTOMERS_PATH
from app.billing.db import db_session
from app.billing.modules.customers.models import Customer
from app.billing.modules.customers.repository import list_customers
from app.billing.modules.customers.service import create_customer, delete_customer, update_customer
from app.billing.modules.customers.validation import CustomerInput, ImageUpload
from app.billing.rbac import require_permission
from app.billing.storage import storage_from_config
from app.billing.utils import current_user, form_flag, render_result

bp = Blueprint("customers", __name__)


def _customer_input() -> CustomerInput:
    return CustomerInput(
        name=request.form.get("name"),
        email=request.form.get("email"),
        image=ImageUpload.from_file_storage(request.files.get("image")),
        clear_image=form_flag(request.form.get("clear_image")),
    )


def _customer_dict(c: Customer) -> dict:
    return {"id": c.id, "name": c.name, "email": c.email, "image_url": c.image_url}


# ---------- List ----------
@bp.get("/customers")
@require_permission("customers.view")
def customers_list():
    s = db_session()
    rows = view_cache().get_or_compute(
        s,
        CUSTOMERS_PATH,
        lambda: [_customer_dict(c) for c in list_customers(s)],
    )
    return jsonify(rows)


# ---------- Create ----------
@bp.post("/customers/create")
@require_permission("customers.create")
def customers_create_post():
    result = create_customer(
        db_session(),
        _customer_input(),
        storage=storage_from_config(current_app.config),
        invalidate=view_cache().invalidator(db_session()),
        actor=current_user(),
    )
    return render_result(result)


# ---------- Edit ----------
@bp.post("/customers/<customer_id>/edit")
@require_permission("customers.edit")
def customer_edit_post(customer_id: str):
    result = update_customer(
        db_session(),
        customer_id,
        _customer_input(),
        storage=storage_from_config(current_app.config),
        invalidate=view_cache().invalidator(db_session()),
        actor=current_user(),
    )
    return render_result(result)


# ---------- Delete ----------
@bp.post("/customers/<customer_id>/delete")
@require_permission("customers.delete")
def customer_delete_post(customer_id: str):
    result = delete_customer(
        db_session(),
        customer_id,
        invalidate=view_cache().invalidator(db_session()),
        actor=current_user(),
    )
    return render_result(result)
