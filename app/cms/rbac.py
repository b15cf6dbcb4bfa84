from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g, jsonify, redirect, request, url_for

from app.cms.models import User

_VIEWER = frozenset(
    {
        "dashboard.view",
        "content.view",
        "media.view",
        "submissions.view",
    }
)
_EDITOR = _VIEWER | {
    "content.edit",
    "media.upload",
    "submissions.edit",
    "pages.edit",
}
_SUPER_ADMIN = _EDITOR | {
    "content.delete",
    "media.delete",
    "media.optimize",
    "submissions.delete",
    "users.manage",
    "settings.manage",
}

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "viewer": _VIEWER,
    "editor": frozenset(_EDITOR),
    "super_admin": frozenset(_SUPER_ADMIN),
}


def user_has_permission(user: User | None, permission_key: str) -> bool:
    if not user or not user.is_active:
        return False
    return permission_key in ROLE_PERMISSIONS.get(user.role, frozenset())


def _wants_json() -> bool:
    return request.path.startswith("/api/")


def require_permission(permission_key: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user: User | None = getattr(g, "current_user", None)
            if not user or not user.is_active:
                if _wants_json():
                    error = getattr(g, "auth_error", None) or "Not authenticated"
                    return jsonify({"error": error}), 401
                nxt = request.full_path or request.path
                # Avoid trailing '?' from full_path when there is no query string.
                if nxt.endswith("?"):
                    nxt = nxt[:-1]
                return redirect(url_for("auth.login_get", next=nxt))
            if not user_has_permission(user, permission_key):
                g.missing_permission = permission_key
                if _wants_json():
                    return jsonify({"error": "Insufficient permissions"}), 403
                abort(403)
            return fn(*args, **kwargs)

        return wrapped

    return decorator
