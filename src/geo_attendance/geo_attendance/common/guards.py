from __future__ import annotations

from functools import wraps

from flask import g, jsonify

from ..core.enums import Role


def make_guards(container):
    """Build ``login_required`` / ``admin_required`` for the device session.

    The logged-in user is exposed to views as ``g.current_user``.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = container.auth_service.current_user()
            if user is None:
                return jsonify({"error": "Please log in to continue"}), 401
            g.current_user = user
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = container.auth_service.current_user()
            if user is None:
                return jsonify({"error": "Please log in to continue"}), 401
            if user.role != Role.ADMIN:
                return jsonify({"error": "Admin access required"}), 403
            g.current_user = user
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required
