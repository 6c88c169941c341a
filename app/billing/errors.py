"""
Error taxonomy for the billing core.

Validators and mutation services do not raise these for expected failures;
they return error-shaped results instead. The exceptions travel between the
repository/storage layers and the services, and between the report service
and its endpoint.
"""
from __future__ import annotations


class BillingError(Exception):
    """Base exception for billing failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(BillingError):
    """Field-level input problems. Recoverable by resubmitting corrected input."""

    def __init__(self, errors: dict[str, list[str]], message: str = "Invalid data."):
        super().__init__(message)
        self.errors = errors


class StorageWriteError(BillingError):
    """Database or filesystem write failed. The current mutation is aborted."""


class NotFoundError(BillingError):
    """The targeted row does not exist."""


class BadRequestError(BillingError):
    """A request parameter is missing or invalid."""
