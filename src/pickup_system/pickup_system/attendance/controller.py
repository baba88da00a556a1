from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file, session

from ..common.http import admin_required, current_role, error_response, login_required
from ..common.validators import require_int_list, require_non_empty
from ..core.exceptions import AuthorizationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @login_required
    def api_scan():
        """Guardian scanned the facility code: check in or pick up each linked child."""
        data = request.get_json(silent=True) or {}
        try:
            role = current_role()
            if role is None:
                raise AuthorizationError("Not authorized as parent")
            report = container.checkin_service.scan(
                guardian_id=int(session["user_id"]),
                role=role,
                code=require_non_empty(data.get("code", ""), "code"),
                child_ids=require_int_list(data.get("child_ids"), "child_ids"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(report.to_dict()), 200

    @app.route("/api/children/<int:child_id>/status", methods=["PUT"], endpoint="api_child_status")
    @admin_required
    def api_child_status(child_id: int):
        data = request.get_json(silent=True) or {}
        try:
            status = container.checkin_service.override_status(
                current_role=current_role(),
                child_id=child_id,
                status=require_non_empty(data.get("status", ""), "status"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "child_id": child_id, "status": status.value}), 200

    # ===== QR CODE ENDPOINTS =====

    @app.route("/api/qr/today", endpoint="api_qr_today")
    @admin_required
    def api_qr_today():
        today = container.clock.today()
        code = container.qr_service.issue_code(container.facility_id, today)
        return jsonify({
            "code": code,
            "facility_id": container.facility_id,
            "valid_from": container.qr_service.window_start(today).isoformat(),
            "validity": container.qr_service.validity.value,
        }), 200

    @app.route("/admin/qr/image", endpoint="admin_qr_image")
    @admin_required
    def admin_qr_image():
        """Today's facility code as a printable PNG."""
        try:
            code = container.qr_service.issue_code(container.facility_id, container.clock.today())
            png = container.qr_service.render_png(code)
        except Exception as e:
            return error_response(e)
        return send_file(io.BytesIO(png), mimetype="image/png")

    # ===== ADMIN DASHBOARD =====

    @app.route("/api/admin/dashboard", endpoint="api_admin_dashboard")
    @admin_required
    def api_admin_dashboard():
        try:
            data = container.dashboard_service.build()
        except Exception as e:
            return error_response(e)
        return jsonify(data.to_dict()), 200
