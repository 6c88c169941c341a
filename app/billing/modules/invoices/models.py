from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import CheckConstraint, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.billing.models import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_invoices_amount_positive"),
        CheckConstraint("status IN ('pending', 'paid')", name="ck_invoices_status"),
        Index("idx_invoices_customer_id", "customer_id"),
        Index("idx_invoices_amount", "amount"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    # Not a declared FK: existence is the store's concern, and deleting a
    # customer leaves its invoices in place.
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # cents
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
