from __future__ import annotations

from flask import Response, flash, g, jsonify, redirect

from app.billing.models import User
from app.billing.results import DONE, FAILED, NOT_FOUND, REJECTED, MutationResult, Redirect

_STATUS_BY_OUTCOME = {
    DONE: 200,
    REJECTED: 400,
    NOT_FOUND: 404,
    FAILED: 500,
}


def current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def render_result(result: MutationResult) -> tuple[Response, int] | Response:
    """Turn a mutation result into an HTTP response."""
    if isinstance(result, Redirect):
        if result.message:
            flash(result.message, "success")
        return redirect(result.target)
    return jsonify(result.to_dict()), _STATUS_BY_OUTCOME.get(result.outcome, 500)


def form_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "on", "yes")
