from __future__ import annotations

import re
from dataclasses import dataclass

from app.billing.results import FieldErrors

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    data: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_file_storage(cls, fs) -> "ImageUpload | None":
        """Build from a werkzeug FileStorage; None when no file was chosen."""
        if fs is None or not fs.filename:
            return None
        return cls(filename=fs.filename, data=fs.read(), content_type=fs.mimetype or None)


@dataclass(frozen=True)
class CustomerInput:
    """Raw customer form fields, as submitted."""

    name: str | None = None
    email: str | None = None
    image: ImageUpload | None = None
    clear_image: bool = False


@dataclass(frozen=True)
class ValidCustomer:
    name: str
    email: str
    image: ImageUpload | None
    clear_image: bool = False


def validate_customer(data: CustomerInput) -> tuple[ValidCustomer | None, FieldErrors]:
    """
    Normalize and check customer fields.

    Every field is checked; errors accumulate per field instead of stopping
    at the first problem. Never raises.
    """
    errors: FieldErrors = {}

    name = (data.name or "").strip()
    if not name:
        errors.setdefault("name", []).append("Name is required")

    email = (data.email or "").strip()
    if not email:
        errors.setdefault("email", []).append("Email is required")
    elif not EMAIL_RE.match(email):
        errors.setdefault("email", []).append("Invalid email address")

    if errors:
        return None, errors

    # zero-byte upload == no file chosen
    image = data.image if data.image is not None and data.image.size > 0 else None
    return ValidCustomer(name=name, email=email, image=image, clear_image=data.clear_image), {}
