from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_principal, login_required, roles_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(container)
    service = container.agenda_service

    @app.route("/api/agendas", methods=["POST"], endpoint="create_agenda")
    @admin_only
    def create_agenda():
        agenda_id = service.create_agenda(speaker_id=current_principal().user_id, data=json_body())
        return jsonify({"message": "Agenda created successfully", "id": agenda_id}), 201

    @app.route("/api/agendas", methods=["GET"], endpoint="list_agendas")
    def list_agendas():
        return jsonify(service.list_agendas(open_filter=request.args.get("open")))

    @app.route("/api/agendas/<int:agenda_id>/visibility", methods=["POST"], endpoint="agenda_visibility")
    @admin_only
    def agenda_visibility(agenda_id: int):
        service.set_visibility(agenda_id=agenda_id, is_visible=json_body().get("is_visible"))
        return jsonify({"success": True})

    @app.route("/api/agendas/<int:agenda_id>/close", methods=["POST"], endpoint="close_agenda")
    @admin_only
    def close_agenda(agenda_id: int):
        service.close_agenda(agenda_id=agenda_id)
        return jsonify({"success": True})

    @app.route("/api/agendas/<int:agenda_id>/vote", methods=["POST"], endpoint="agenda_vote")
    @login_required(container)
    def agenda_vote(agenda_id: int):
        service.cast_vote(
            agenda_id=agenda_id,
            voter_id=current_principal().user_id,
            option_id=json_body().get("option_id"),
        )
        return jsonify({"success": True})

    @app.route("/api/agendas/<int:agenda_id>/my-vote", methods=["GET"], endpoint="agenda_my_vote")
    @login_required(container)
    def agenda_my_vote(agenda_id: int):
        return jsonify(service.my_vote(agenda_id=agenda_id, voter_id=current_principal().user_id))

    @app.route("/api/agendas/<int:agenda_id>/counts", methods=["GET"], endpoint="agenda_counts")
    def agenda_counts(agenda_id: int):
        return jsonify(service.counts(agenda_id=agenda_id))

    @app.route("/api/agendas/<int:agenda_id>/votes", methods=["GET"], endpoint="agenda_votes")
    @admin_only
    def agenda_votes(agenda_id: int):
        return jsonify(service.ballots(agenda_id=agenda_id))
