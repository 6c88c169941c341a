"""
Session-cookie login for dashboard operators.

The rest of the app only asks one question of this module: who is the
current user (g.current_user), if anyone. Permission checks live in rbac.py.
"""
from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone

from flask import Blueprint, current_app, g, redirect, request, session, url_for
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash

from app.billing.db import db_session
from app.billing.models import User

bp = Blueprint("auth", __name__)

LOGIN_ATTEMPT_LIMIT = 5
LOGIN_ATTEMPT_WINDOW = timedelta(minutes=5)


class LoginThrottle:
    """Failed-login attempts per client address within a sliding window."""

    def __init__(self, limit: int = LOGIN_ATTEMPT_LIMIT, window: timedelta = LOGIN_ATTEMPT_WINDOW) -> None:
        self.limit = limit
        self.window = window
        self._lock = threading.Lock()
        self._attempts: dict[str, list[datetime]] = {}

    def _prune(self, now: datetime) -> None:
        cutoff = now - self.window
        for key in list(self._attempts):
            recent = [t for t in self._attempts[key] if t > cutoff]
            if recent:
                self._attempts[key] = recent
            else:
                del self._attempts[key]

    def blocked(self, key: str, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        with self._lock:
            self._prune(now)
            return len(self._attempts.get(key, ())) >= self.limit

    def failed(self, key: str, now: datetime | None = None) -> None:
        with self._lock:
            self._attempts.setdefault(key, []).append(now or datetime.now(timezone.utc))

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)


def login_throttle() -> LoginThrottle:
    return current_app.extensions.setdefault("login_throttle", LoginThrottle())


def authenticate(s: Session, email: str, password: str) -> User | None:
    user = s.query(User).filter(User.email == email.strip().lower()).one_or_none()
    if user is None or not user.is_active or not check_password_hash(user.password_hash, password):
        return None
    return user


def _safe_next(nxt: str) -> str | None:
    # local paths only
    return nxt if nxt.startswith("/") and not nxt.startswith("//") else None


def load_current_user() -> None:
    g.request_id = getattr(g, "request_id", None) or uuid.uuid4().hex
    g.current_user = None
    if request.path.startswith("/health"):
        return

    user_id = session.get("user_id")
    if not user_id:
        return
    try:
        user = db_session().get(User, int(user_id))
    except SQLAlchemyError:
        current_app.logger.exception("Could not load session user %s; logging out", user_id)
        user = None
    if user is None or not user.is_active:
        session.pop("user_id", None)
        return
    g.current_user = user


@bp.get("/login")
def login_get():
    return {"error": "Login required.", "next": (request.args.get("next") or "").strip()}, 401


@bp.post("/login")
def login_post():
    ip = request.remote_addr or "unknown"
    throttle = login_throttle()
    if throttle.blocked(ip):
        return {"error": "Too many login attempts. Please wait 5 minutes."}, 429

    email = request.form.get("email") or ""
    user = authenticate(db_session(), email, request.form.get("password") or "")
    if user is None:
        throttle.failed(ip)
        current_app.logger.info("Failed login for %s from %s", email.strip().lower(), ip)
        return {"error": "Invalid credentials."}, 401

    throttle.reset(ip)
    session["user_id"] = user.id
    return redirect(_safe_next((request.form.get("next") or "").strip()) or url_for("customers.customers_list"))


@bp.get("/logout")
def logout():
    session.pop("user_id", None)
    return redirect(url_for("auth.login_get"))
