from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_principal, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    senators = roles_required(container, Role.SENATOR)
    service = container.hour_service

    @app.route("/api/senate/hours", methods=["POST"], endpoint="log_hours")
    @senators
    def log_hours():
        entry = service.log_hours(user_id=current_principal().user_id, data=json_body())
        return jsonify({"success": True, "entry": entry})

    @app.route("/api/senate/hours", methods=["GET"], endpoint="list_hours")
    @senators
    def list_hours():
        return jsonify({"success": True, "logs": service.list_entries(user_id=current_principal().user_id)})

    @app.route("/api/senate/hours", methods=["DELETE"], endpoint="delete_hours")
    @senators
    def delete_hours():
        deleted = service.delete_entry(user_id=current_principal().user_id, entry_id_value=json_body().get("entryId"))
        return jsonify({"success": True, "message": "Entry deleted successfully", "deletedCount": deleted})

    @app.route("/api/admin/senate-logs", methods=["GET"], endpoint="legacy_senate_logs")
    def legacy_senate_logs():
        response = jsonify({"message": "moved", "location": "/api/admin/hour-log"})
        response.status_code = 301
        response.headers["Location"] = "/api/admin/hour-log"
        return response
