from __future__ import annotations

import json
import logging

from flask import Flask, Response, jsonify, request, stream_with_context

from ..common.http import admin_required, error_response
from ..common.validators import require_int
from ..core.enums import ActionKind
from ..core.exceptions import ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _sse_frame(payload) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def register(app: Flask, container: Container) -> None:
    def _parse_type(value):
        if not value:
            return None
        try:
            return ActionKind(str(value).upper())
        except ValueError:
            raise ValidationError(f"Unknown notification type: {value}")

    @app.route("/api/notifications", methods=["GET"], endpoint="api_notifications")
    @admin_required
    def api_notifications():
        try:
            notification_type = _parse_type(request.args.get("type"))
            limit = request.args.get("limit")
            feed = container.notification_service.list_feed(
                type=notification_type,
                limit=require_int(limit, "limit") if limit else None,
            )
            summary = container.notification_service.summary()
        except Exception as e:
            return error_response(e)
        return jsonify({
            "success": True,
            "notifications": [n.to_dict() for n in feed],
            "summary": summary.to_dict(),
        }), 200

    @app.route("/api/notifications", methods=["PUT"], endpoint="api_notifications_mark_read")
    @admin_required
    def api_notifications_mark_read():
        """Mark one notification (``{"id": ...}``) or all (``{"mark_all": true}``) as read."""
        data = request.get_json(silent=True) or {}
        try:
            if data.get("mark_all"):
                changed = container.notification_service.mark_all_read()
                return jsonify({"success": True, "updated": changed}), 200
            if "id" not in data:
                raise ValidationError("Provide a notification id or mark_all")
            container.notification_service.mark_read(require_int(data["id"], "id"))
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True}), 200

    @app.route("/api/notifications", methods=["DELETE"], endpoint="api_notifications_clear")
    @admin_required
    def api_notifications_clear():
        try:
            removed = container.notification_service.clear_all()
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "deleted": removed}), 200

    @app.route("/api/notifications/stream", endpoint="api_notifications_stream")
    @app.route("/api/notifications/sse", endpoint="api_notifications_sse")
    @admin_required
    def api_notifications_stream():
        """Server-Sent Events: the full notification set on every change."""
        service = container.notification_service
        heartbeat = container.stream_heartbeat_seconds

        def generate():
            with service.hub.subscribe() as sub:
                try:
                    first = _sse_frame(service.snapshot())
                except Exception:
                    # Keep the stream open; the next change pushes a full snapshot.
                    logger.exception("Initial notification snapshot failed")
                    first = ": snapshot unavailable\n\n"
                yield first
                for payload in service.hub.listen(sub, heartbeat_seconds=heartbeat):
                    if payload is None:
                        yield ": keep-alive\n\n"
                    else:
                        yield _sse_frame(payload)

        return Response(
            stream_with_context(generate()),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
