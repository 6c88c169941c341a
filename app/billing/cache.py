"""
Cached listing views.

Listing endpoints compute their payload once per worker and serve it from
here. Every cached payload is tagged with the listing's version, which lives
in the `view_versions` table so all workers share it. Mutations bump the
version inside their own transaction, so once a mutation has committed no
worker serves a payload computed before it.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from flask import Flask, current_app
from sqlalchemy.orm import Session

from app.billing.models import ViewVersion

logger = logging.getLogger(__name__)

Token = tuple[tuple[str, int], ...]


def normalize_path(path: str) -> str:
    return path.rstrip("/") or "/"


def _ancestors(path: str) -> list[str]:
    """Path and its prefixes: /a/b -> /, /a, /a/b."""
    parts = [p for p in path.split("/") if p]
    return ["/"] + ["/" + "/".join(parts[: i + 1]) for i in range(len(parts))]


def current_token(s: Session, path: str) -> Token:
    """
    Versions of the path and every path above it. Invalidating a path bumps
    its own row, so views beneath it see a new token too.
    """
    rows = s.query(ViewVersion.path, ViewVersion.version).filter(ViewVersion.path.in_(_ancestors(path))).all()
    return tuple(sorted((p, v) for p, v in rows))


def bump_version(s: Session, path: str) -> None:
    """Bump the shared version of a path. Takes effect when `s` commits."""
    bumped = (
        s.query(ViewVersion)
        .filter(ViewVersion.path == path)
        .update({ViewVersion.version: ViewVersion.version + 1}, synchronize_session=False)
    )
    if not bumped:
        s.add(ViewVersion(path=path, version=1))
        s.flush()


class ViewCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._views: dict[str, tuple[Token, Any]] = {}

    def get_or_compute(self, s: Session, path: str, compute: Callable[[], Any]) -> Any:
        path = normalize_path(path)
        # read the version before the rows, so a payload is never newer-tagged than its data
        token = current_token(s, path)
        with self._lock:
            hit = self._views.get(path)
        if hit is not None and hit[0] == token:
            return hit[1]
        value = compute()
        with self._lock:
            self._views[path] = (token, value)
        return value

    def invalidate(self, s: Session, path: str) -> None:
        path = normalize_path(path)
        bump_version(s, path)
        with self._lock:
            stale = [p for p in self._views if p == path or p.startswith(path.rstrip("/") + "/")]
            for p in stale:
                del self._views[p]
        logger.debug("Invalidated cached view %s (%d local entries)", path, len(stale))

    def invalidator(self, s: Session) -> Callable[[str], None]:
        """`invalidate` bound to the mutation's session, as services expect it."""
        return lambda path: self.invalidate(s, path)

    def clear(self) -> None:
        with self._lock:
            self._views.clear()

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return normalize_path(path) in self._views


def init_view_cache(app: Flask) -> ViewCache:
    cache = ViewCache()
    app.extensions["view_cache"] = cache
    return cache


def view_cache(app: Flask | None = None) -> ViewCache:
    if app is None:
        app = current_app
    return app.extensions["view_cache"]
