from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.guards import make_guards
from ..common.request_utils import json_body
from ..core.constants import EMPLOYEE_LOG_LIMIT
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required, _ = make_guards(container)

    @app.route("/api/auth/signup", methods=["POST"], endpoint="signup")
    def signup():
        data = json_body()
        # Admin accounts are provisioned out of band.
        user = container.auth_service.signup(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            phone=data.get("phone"),
            role=Role.EMPLOYEE,
        )
        return jsonify({"user": user.public_dict()}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            role = Role(data.get("role") or Role.EMPLOYEE.value)
        except ValueError:
            raise ValidationError("Unknown role")

        user = container.auth_service.login(
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
        )
        return jsonify({"user": user.public_dict()})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        container.auth_service.logout()
        return jsonify({"ok": True})

    @app.route("/api/me", endpoint="me")
    @login_required
    def me():
        user = g.current_user
        svc = container.attendance_service
        logs = svc.get_user_logs(user.id)[:EMPLOYEE_LOG_LIMIT]
        return jsonify(
            {
                "user": user.public_dict(),
                **svc.latest_status_for(user.id).to_dict(),
                "logs": [r.to_dict() for r in logs],
            }
        )
