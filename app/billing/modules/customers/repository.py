from __future__ import annotations

from sqlalchemy.orm import Session

from app.billing.errors import NotFoundError
from app.billing.modules.customers.models import Customer


def get_customer(s: Session, customer_id: str) -> Customer | None:
    return s.get(Customer, customer_id)


def list_customers(s: Session) -> list[Customer]:
    return s.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all()


def insert_customer(s: Session, *, name: str, email: str, image_url: str | None) -> str:
    c = Customer(name=name, email=email, image_url=image_url)
    s.add(c)
    s.flush()
    return c.id


def update_customer(
    s: Session,
    customer_id: str,
    *,
    name: str,
    email: str,
    image_url: str | None,
    clear_image: bool = False,
) -> Customer:
    """
    Rewrite name/email. image_url=None keeps the stored image unless
    clear_image is set. Raises NotFoundError when no row matches.
    """
    c = get_customer(s, customer_id)
    if c is None:
        raise NotFoundError(f"Customer {customer_id} not found.")
    c.name = name
    c.email = email
    if image_url is not None:
        c.image_url = image_url
    elif clear_image:
        c.image_url = None
    s.flush()
    return c


def delete_customer(s: Session, customer_id: str) -> int:
    """Idempotent; returns the number of rows removed (0 or 1)."""
    return s.query(Customer).filter(Customer.id == customer_id).delete(synchronize_session=False)
