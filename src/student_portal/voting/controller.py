from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_principal, login_required, roles_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(container)
    service = container.voting_service

    @app.route("/api/voting", methods=["GET"], endpoint="list_voting")
    def list_voting():
        return jsonify(service.list_definitions())

    @app.route("/api/voting/<vote_id>", methods=["GET"], endpoint="get_voting")
    def get_voting(vote_id: str):
        return jsonify(service.get_vote(vote_id))

    @app.route("/api/voting/<vote_id>", methods=["POST"], endpoint="cast_voting")
    @login_required(container)
    def cast_voting(vote_id: str):
        service.cast(vote_id=vote_id, user_id=current_principal().user_id, option_id=json_body().get("optionId"))
        return jsonify({"success": True})

    @app.route("/api/admin/votes", methods=["GET"], endpoint="admin_list_votes")
    @admin_only
    def admin_list_votes():
        return jsonify({"success": True, "voting": service.admin_list()})

    @app.route("/api/admin/votes", methods=["POST"], endpoint="admin_create_vote")
    @admin_only
    def admin_create_vote():
        return jsonify({"success": True, "id": service.create(data=json_body())}), 201

    @app.route("/api/admin/votes", methods=["PUT"], endpoint="admin_update_vote")
    @admin_only
    def admin_update_vote():
        service.replace(data=json_body())
        return jsonify({"success": True})

    @app.route("/api/admin/votes", methods=["DELETE"], endpoint="admin_delete_vote")
    @admin_only
    def admin_delete_vote():
        service.delete(vote_id=json_body().get("id"))
        return jsonify({"success": True})
