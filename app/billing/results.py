"""
Tagged outcomes of a mutation.

A mutation ends in one of two shapes: the caller is sent to a listing view
(`Redirect`), or a message (and possibly field errors) is rendered in place
(`Rendered`). The presentation layer decides what each means over HTTP.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

FieldErrors = dict[str, list[str]]

DONE = "done"
REJECTED = "rejected"
FAILED = "failed"
NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Redirect:
    target: str
    message: str | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Rendered:
    outcome: str
    message: str | None = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome == DONE

    def to_dict(self) -> dict:
        out: dict = {"message": self.message}
        if self.errors:
            out["errors"] = self.errors
        return out


MutationResult = Union[Redirect, Rendered]


def rejected(errors: FieldErrors, message: str) -> Rendered:
    return Rendered(outcome=REJECTED, message=message, errors=errors)


def failed(message: str) -> Rendered:
    return Rendered(outcome=FAILED, message=message)


def not_found(message: str) -> Rendered:
    return Rendered(outcome=NOT_FOUND, message=message)
