"""Session-based access guards shared by every controller."""
from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def current_user() -> dict | None:
    return session.get("user")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_user():
            return jsonify({"error": "Not authenticated"}), 401
        return view(*args, **kwargs)

    return wrapper


def require_role(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if not user or user.get("role") not in allowed:
                return jsonify({"error": "Forbidden: Insufficient permissions"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_actor() -> tuple[int | None, str | None]:
    """(id, username) of the logged-in user, for audit entries."""
    user = current_user() or {}
    return user.get("id"), user.get("username")
