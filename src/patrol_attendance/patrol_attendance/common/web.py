"""Flask helpers shared by the feature controllers.

Identity comes from the external auth layer, which stores ``user_id`` and
``role`` in the Flask session; nothing here issues or checks credentials.
"""

from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def json_error(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return json_error("Please sign in to continue", 401)
            if session.get("role") not in allowed:
                return json_error("You do not have permission for this action", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator
