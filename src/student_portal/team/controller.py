from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import roles_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(container)
    service = container.team_service

    @app.route("/api/team", methods=["GET"], endpoint="get_team")
    def get_team():
        return jsonify(service.get_members())

    @app.route("/api/team", methods=["PUT"], endpoint="update_team")
    @admin_only
    def update_team():
        members = service.update_member(data=json_body())
        return jsonify({"success": True, "message": "Team member updated successfully", "teamMembers": members})

    @app.route("/api/team/image", methods=["POST"], endpoint="upload_team_image")
    @admin_only
    def upload_team_image():
        image_path = service.save_image(file=request.files.get("file"), position=request.form.get("position"))
        return jsonify({"success": True, "imagePath": image_path, "message": "Image uploaded successfully"})
