from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g, redirect, request, url_for


def _login_redirect():
    target = request.full_path.rstrip("?") if request.query_string else request.path
    return redirect(url_for("auth.login_get", next=target))


def require_permission(key: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Gate a dashboard view on one permission key.

    Anonymous requests go to the login page; a signed-in user without `key`
    gets 403 with the key recorded on g.missing_permission.
    """

    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def gated(*args: Any, **kwargs: Any):
            user = getattr(g, "current_user", None)
            if user is None:
                return _login_redirect()
            if key not in user.permission_keys():
                g.missing_permission = key
                abort(403)
            return view(*args, **kwargs)

        return gated

    return decorator
