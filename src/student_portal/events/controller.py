from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_principal, login_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    def list_events():
        events = container.event_service.list_events(
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return jsonify(events)

    @app.route("/api/events", methods=["POST"], endpoint="add_event")
    @login_required(container)
    def add_event():
        event_id = container.event_service.add_event(user_id=current_principal().user_id, data=json_body())
        return jsonify({"message": "Event added successfully", "eventId": event_id}), 201

    @app.route("/api/events", methods=["PUT"], endpoint="update_event")
    @login_required(container)
    def update_event():
        principal = current_principal()
        container.event_service.update_event(user_id=principal.user_id, current_role=principal.role, data=json_body())
        return jsonify({"message": "Event updated successfully"})

    @app.route("/api/events", methods=["DELETE"], endpoint="delete_event")
    @login_required(container)
    def delete_event():
        principal = current_principal()
        event_id = request.args.get("id") or json_body().get("id")
        container.event_service.delete_event(user_id=principal.user_id, current_role=principal.role, event_id=event_id)
        return jsonify({"message": "Event deleted successfully"})
