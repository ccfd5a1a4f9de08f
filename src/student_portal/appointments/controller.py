from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_principal, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    attorney_only = roles_required(container, Role.ATTORNEY)
    service = container.appointment_service

    @app.route("/api/availability", methods=["POST"], endpoint="add_availability")
    @attorney_only
    def add_availability():
        count = service.add_availability(attorney_id=current_principal().user_id, data=json_body())
        return jsonify({"message": "Availability added successfully", "count": count}), 201

    @app.route("/api/availability", methods=["GET"], endpoint="list_availability")
    def list_availability():
        return jsonify(service.list_sessions())

    @app.route("/api/availability/open", methods=["GET"], endpoint="list_open_slots")
    def list_open_slots():
        return jsonify(service.list_open_slots())

    @app.route("/api/attorneys/availability", methods=["GET"], endpoint="attorneys_availability")
    def attorneys_availability():
        return jsonify(service.list_attorneys_with_availability(week_start=request.args.get("weekStart")))

    @app.route("/api/availability", methods=["DELETE"], endpoint="delete_availability")
    @attorney_only
    def delete_availability():
        service.delete_availability(attorney_id=current_principal().user_id, data=json_body())
        return jsonify({"message": "Availability deleted successfully"})

    @app.route("/api/availability/bulk", methods=["DELETE"], endpoint="bulk_delete_availability")
    @attorney_only
    def bulk_delete_availability():
        result = service.bulk_delete_availability(
            attorney_id=current_principal().user_id,
            slots=json_body().get("slots"),
        )
        return jsonify(result)

    @app.route("/api/appointments", methods=["POST"], endpoint="book_appointment")
    @login_required(container)
    def book_appointment():
        service.book_appointment(student_id=current_principal().user_id, data=json_body())
        return jsonify({"message": "Appointment booked successfully"}), 201

    @app.route("/api/appointments", methods=["GET"], endpoint="list_appointments")
    @login_required(container)
    def list_appointments():
        principal = current_principal()
        return jsonify(service.list_booked(user_id=principal.user_id, current_role=principal.role))

    @app.route("/api/appointments", methods=["DELETE"], endpoint="delete_appointment")
    @attorney_only
    def delete_appointment():
        principal = current_principal()
        service.delete_appointment(
            user_id=principal.user_id,
            current_role=principal.role,
            appointment_id=json_body().get("appointmentId"),
        )
        return jsonify({"message": "Appointment deleted successfully"})
