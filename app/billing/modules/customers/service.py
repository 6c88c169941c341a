"""
Customer mutations.

Each operation runs validate -> (store image) -> write row, audit event and
listing-version bumps in one transaction, and reports how it ended as a
Redirect or Rendered result. Expected failures never raise out of here.

An image is written before the row. If the row write then fails, the image
just written is deleted again (best effort); a failed cleanup is only logged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from app.billing.audit import record_event
from app.billing.constants import CUSTOMERS_PATH, INVOICES_PATH
from app.billing.db import atomic
from app.billing.errors import NotFoundError, StorageWriteError
from app.billing.models import User
from app.billing.modules.customers import repository as repo
from app.billing.modules.customers.assets import delete_customer_image, save_customer_image
from app.billing.modules.customers.validation import CustomerInput, validate_customer
from app.billing.results import DONE, MutationResult, Redirect, Rendered, failed, not_found, rejected
from app.billing.storage import Storage, StorageError

logger = logging.getLogger(__name__)

Invalidate = Callable[[str], None]


def _discard_orphan(storage: Storage, image_url: str | None) -> None:
    if not image_url:
        return
    try:
        delete_customer_image(storage, image_url)
        logger.info("Removed orphaned customer image %s", image_url)
    except StorageError:
        logger.exception("Could not remove orphaned customer image %s", image_url)


def _store_image(storage: Storage, image) -> tuple[str | None, MutationResult | None]:
    if image is None:
        return None, None
    try:
        return save_customer_image(storage, image), None
    except StorageError:
        logger.exception("Error saving image (filename=%s size=%s)", image.filename, image.size)
        return None, failed("Error saving image.")


def create_customer(
    s: Session,
    data: CustomerInput,
    *,
    storage: Storage,
    invalidate: Invalidate,
    actor: User | None = None,
) -> MutationResult:
    customer, errors = validate_customer(data)
    if customer is None:
        return rejected(errors, "Invalid data.")

    image_url, failure = _store_image(storage, customer.image)
    if failure is not None:
        return failure

    try:
        with atomic(s):
            customer_id = repo.insert_customer(s, name=customer.name, email=customer.email, image_url=image_url)
            record_event(
                s,
                actor=actor,
                action="customer.create",
                entity_type="Customer",
                entity_id=customer_id,
                metadata={"name": customer.name, "email": customer.email, "image_url": image_url},
            )
            invalidate(CUSTOMERS_PATH)
    except StorageWriteError:
        logger.exception("Database Error: failed to create customer (email=%s)", customer.email)
        _discard_orphan(storage, image_url)
        return failed("Failed to create customer.")

    return Rendered(outcome=DONE, message="Customer created successfully!")


def update_customer(
    s: Session,
    customer_id: str,
    data: CustomerInput,
    *,
    storage: Storage,
    invalidate: Invalidate,
    actor: User | None = None,
) -> MutationResult:
    customer, errors = validate_customer(data)
    if customer is None:
        return rejected(errors, "Invalid data.")

    # Only a newly supplied file replaces the stored image.
    image_url, failure = _store_image(storage, customer.image)
    if failure is not None:
        return failure

    try:
        with atomic(s):
            repo.update_customer(
                s,
                customer_id,
                name=customer.name,
                email=customer.email,
                image_url=image_url,
                clear_image=customer.clear_image,
            )
            record_event(
                s,
                actor=actor,
                action="customer.edit",
                entity_type="Customer",
                entity_id=customer_id,
                metadata={
                    "name": customer.name,
                    "email": customer.email,
                    "image_url": image_url,
                    "clear_image": customer.clear_image,
                },
            )
            # invoice listings show the customer's name too
            invalidate(CUSTOMERS_PATH)
            invalidate(INVOICES_PATH)
    except NotFoundError:
        logger.warning("Update of missing customer %s", customer_id)
        _discard_orphan(storage, image_url)
        return not_found("Customer not found.")
    except StorageWriteError:
        logger.exception("Database Error: failed to update customer %s", customer_id)
        _discard_orphan(storage, image_url)
        return failed("Failed to update customer.")

    return Redirect(target=CUSTOMERS_PATH, message="Customer updated.")


def delete_customer(
    s: Session,
    customer_id: str,
    *,
    invalidate: Invalidate,
    actor: User | None = None,
) -> MutationResult:
    """Deleting an id that does not exist is a successful no-op."""
    try:
        with atomic(s):
            removed = repo.delete_customer(s, customer_id)
            if removed:
                record_event(s, actor=actor, action="customer.delete", entity_type="Customer", entity_id=customer_id)
            invalidate(CUSTOMERS_PATH)
            invalidate(INVOICES_PATH)
    except StorageWriteError:
        logger.exception("Database Error: failed to delete customer %s", customer_id)
        return failed("Database Error: Failed to Delete Customer.")

    return Redirect(target=CUSTOMERS_PATH, message="Customer deleted.")
