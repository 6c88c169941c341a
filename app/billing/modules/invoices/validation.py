from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, DecimalException

from app.billing.constants import INVOICE_STATUSES
from app.billing.results import FieldErrors

AMOUNT_REQUIRED = "Please enter an amount greater than $0."
AMOUNT_NOT_A_NUMBER = "Amount must be a number."
CUSTOMER_REQUIRED = "Please select a customer."
STATUS_REQUIRED = "Please select an invoice status."
AMOUNT_TOO_LARGE = "Amount is too large."

# invoices.amount is a 32-bit integer column
MAX_AMOUNT_CENTS = 2_147_483_647

# plain ASCII decimal literal; no digit separators, no "NaN"/"Infinity"
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


@dataclass(frozen=True)
class InvoiceInput:
    """Raw invoice form fields, as submitted."""

    customer_id: str | None = None
    amount: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class ValidInvoice:
    customer_id: str
    amount: Decimal
    status: str

    @property
    def amount_cents(self) -> int:
        return to_cents(self.amount)


def to_cents(amount: Decimal) -> int:
    """12.34 -> 1234; fractions of a cent round half-up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount(raw: str | None) -> tuple[Decimal | None, str | None]:
    """
    Coerce a decimal string to a positive amount.

    Blank input counts as zero. Returns (amount, None) or (None, message).
    """
    text = (raw or "").strip()
    if not text:
        return None, AMOUNT_REQUIRED
    if not _NUMBER_RE.fullmatch(text):
        return None, AMOUNT_NOT_A_NUMBER
    try:
        amount = Decimal(text)
        cents = to_cents(amount)
    except DecimalException:
        return None, AMOUNT_NOT_A_NUMBER
    if amount <= 0 or cents < 1:
        return None, AMOUNT_REQUIRED
    if cents > MAX_AMOUNT_CENTS:
        return None, AMOUNT_TOO_LARGE
    return amount, None


def validate_invoice(data: InvoiceInput) -> tuple[ValidInvoice | None, FieldErrors]:
    """Check all invoice fields, collecting every error. Never raises."""
    errors: FieldErrors = {}

    customer_id = (data.customer_id or "").strip()
    if not customer_id:
        errors.setdefault("customerId", []).append(CUSTOMER_REQUIRED)

    amount, amount_error = parse_amount(data.amount)
    if amount_error:
        errors.setdefault("amount", []).append(amount_error)

    status = data.status
    if status not in INVOICE_STATUSES:
        errors.setdefault("status", []).append(STATUS_REQUIRED)

    if errors or amount is None or status is None:
        return None, errors
    return ValidInvoice(customer_id=customer_id, amount=amount, status=status), {}
