from __future__ import annotations

import logging

from flask import Flask, g, jsonify, request

from ..common.guards import make_guards
from ..common.request_utils import json_body
from ..core.constants import ADMIN_LOG_LIMIT, EMPLOYEE_LOG_LIMIT, GEOLOCATION_TIMEOUT_SECONDS
from ..core.enums import AttendanceType
from ..geo.device import DeviceInfo
from ..geo.position import ReportedPositionProvider
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/api/config", endpoint="client_config")
    def client_config():
        return jsonify(
            {
                "geolocation": {
                    "enableHighAccuracy": True,
                    "timeout": int(GEOLOCATION_TIMEOUT_SECONDS * 1000),
                    "maximumAge": 0,
                },
                "employeeLogLimit": EMPLOYEE_LOG_LIMIT,
                "adminLogLimit": ADMIN_LOG_LIMIT,
            }
        )

    def _record(kind: AttendanceType):
        user = g.current_user
        payload = json_body()
        outcome = container.attendance_service.create_attendance(
            user_id=user.id,
            type=kind,
            user_name=user.name,
            locator=ReportedPositionProvider.from_payload(payload),
            device=DeviceInfo.from_headers(request.headers),
        )
        message = "Checked in." if kind == AttendanceType.CHECKIN else "Checked out."
        status = container.attendance_service.latest_status_for(user.id)
        return jsonify({"message": message, **outcome.to_dict(), "status": status.status.value}), 201

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        return _record(AttendanceType.CHECKIN)

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        return _record(AttendanceType.CHECKOUT)

    @app.route("/api/admin/roster", endpoint="admin_roster")
    @admin_required
    def admin_roster():
        svc = container.attendance_service
        entries = svc.roster(container.user_service.list_users())
        return jsonify(
            {
                "employees": [e.to_dict() for e in entries],
                "workingCount": svc.working_count(entries),
                "total": len(entries),
            }
        )

    @app.route("/api/admin/users/<user_id>/logs", endpoint="admin_user_logs")
    @admin_required
    def admin_user_logs(user_id: str):
        user = container.user_service.get_user(user_id)
        if user is None:
            return jsonify({"error": "Employee not found"}), 404

        svc = container.attendance_service
        logs = svc.get_user_logs(user.id)[:ADMIN_LOG_LIMIT]
        return jsonify(
            {
                "user": user.public_dict(),
                **svc.latest_status_for(user.id).to_dict(),
                "logs": [r.to_dict() for r in logs],
            }
        )

    @app.route("/api/admin/users/<user_id>/remote-logs", endpoint="admin_user_remote_logs")
    @admin_required
    def admin_user_remote_logs(user_id: str):
        logs = container.attendance_service.fetch_remote_logs(user_id)[:ADMIN_LOG_LIMIT]
        return jsonify({"logs": [r.to_dict() for r in logs]})

    @app.route("/api/admin/reset-demo", methods=["POST"], endpoint="reset_demo")
    @admin_required
    def reset_demo():
        logger.info("admin %s reset the local demo data", g.current_user.id)
        container.attendance_service.reset_demo()
        return jsonify({"ok": True})
